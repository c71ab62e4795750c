"""Tests for TaskLedger: append-only writes, queries, persistence."""

from orchestrator.adapters.storage.json_store import JsonStorage, MemoryStorage
from orchestrator.domain.models import (
    KIND_CHAIN,
    KIND_SINGLE,
    STATUS_FAILED,
    STATUS_SUCCESS,
    Action,
)
from orchestrator.engine.ledger import TaskLedger

ACTION = Action("shell", "run", {"cmd": "echo"})


def _record(ledger, device_id="d1", status=STATUS_SUCCESS, kind=KIND_SINGLE, result="ok"):
    return ledger.record(
        name=ACTION.name,
        kind=kind,
        action=ACTION,
        status=status,
        result=result,
        device_id=device_id,
    )


class TestRecord:
    def test_fields(self, ledger):
        entry = _record(ledger)
        assert entry.plugin == "shell"
        assert entry.action == "run"
        assert entry.params == {"cmd": "echo"}
        assert entry.created_at
        assert len(ledger) == 1

    def test_params_snapshot_is_a_copy(self, ledger):
        params = {"cmd": "a"}
        entry = ledger.record("n", KIND_SINGLE, Action("shell", "run", params), STATUS_SUCCESS, None, "d1")
        params["cmd"] = "b"
        assert entry.params == {"cmd": "a"}

    def test_distinct_ids(self, ledger):
        assert _record(ledger).id != _record(ledger).id

    def test_get(self, ledger):
        entry = _record(ledger)
        assert ledger.get(entry.id) is entry
        assert ledger.get("missing") is None


class TestQuery:
    def test_newest_first(self, ledger):
        first = _record(ledger, result=1)
        second = _record(ledger, result=2)
        assert [r.id for r in ledger.query()] == [second.id, first.id]

    def test_filters(self, ledger):
        _record(ledger, device_id="d1", status=STATUS_SUCCESS)
        _record(ledger, device_id="d1", status=STATUS_FAILED, kind=KIND_CHAIN)
        _record(ledger, device_id="d2", status=STATUS_FAILED)
        assert len(ledger.query(device_id="d1")) == 2
        assert len(ledger.query(status=STATUS_FAILED)) == 2
        assert len(ledger.query(device_id="d1", status=STATUS_FAILED)) == 1
        assert len(ledger.query(kind=KIND_CHAIN)) == 1

    def test_limit(self, storage):
        ledger = TaskLedger(storage, query_limit=3)
        for _ in range(5):
            _record(ledger)
        assert len(ledger.query()) == 3
        assert len(ledger.query(limit=4)) == 4


class TestPersistence:
    def test_reload_from_json(self, tmp_path):
        ledger = TaskLedger(JsonStorage(str(tmp_path)))
        entry = _record(ledger, status=STATUS_FAILED, result={"error": "boom"})

        reloaded = TaskLedger(JsonStorage(str(tmp_path)))
        assert len(reloaded) == 1
        assert reloaded.get(entry.id).result == {"error": "boom"}

    def test_bad_rows_skipped(self):
        storage = MemoryStorage()
        storage.save("tasks", [{"no_id": True}, "junk", {"id": "t1", "status": "SUCCESS"}])
        assert len(TaskLedger(storage)) == 1

    def test_save_failure_does_not_raise(self):
        class BrokenStorage(MemoryStorage):
            def save(self, key, data):
                raise OSError("disk full")

        ledger = TaskLedger(BrokenStorage())
        entry = _record(ledger)
        assert ledger.get(entry.id) is entry


class TestRetention:
    def test_oldest_records_dropped(self):
        storage = MemoryStorage()
        ledger = TaskLedger(storage, retention=3)
        entries = [_record(ledger) for _ in range(5)]

        assert len(ledger) == 3
        assert ledger.get(entries[0].id) is None
        assert ledger.get(entries[1].id) is None
        assert [r.id for r in ledger.query()] == [e.id for e in reversed(entries[2:])]
        assert [row["id"] for row in storage.load("tasks")] == [e.id for e in entries[2:]]

    def test_trimmed_on_load(self):
        storage = MemoryStorage()
        full = TaskLedger(storage, retention=0)
        entries = [_record(full) for _ in range(4)]

        ledger = TaskLedger(storage, retention=2)
        assert len(ledger) == 2
        assert ledger.get(entries[-1].id) is not None
        assert ledger.get(entries[0].id) is None

    def test_zero_keeps_everything(self, storage):
        ledger = TaskLedger(storage, retention=0)
        for _ in range(10):
            _record(ledger)
        assert len(ledger) == 10
