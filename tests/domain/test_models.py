"""Tests for domain/models.py: Action, TaskRecord, summaries."""

import pytest

from orchestrator.domain.models import (
    KIND_CHAIN,
    PREVIOUS_RESULT_KEY,
    STATUS_FAILED,
    Action,
    ChainSummary,
    Device,
    DispatchResult,
    StepResult,
    TaskRecord,
)


class TestAction:
    def test_name(self):
        assert Action("window-control", "list").name == "window-control.list"

    def test_params_default_empty(self):
        assert Action("shell", "run").params == {}

    def test_empty_plugin_rejected(self):
        with pytest.raises(ValueError, match="plugin"):
            Action("", "list")

    def test_blank_action_rejected(self):
        with pytest.raises(ValueError, match="name"):
            Action("shell", "   ")

    def test_with_params_returns_copy(self):
        original = Action("shell", "run", {"cmd": "dir"})
        updated = original.with_params(**{PREVIOUS_RESULT_KEY: [1, 2]})
        assert updated.params == {"cmd": "dir", "previousResult": [1, 2]}
        assert original.params == {"cmd": "dir"}

    def test_immutable(self):
        action = Action("shell", "run")
        with pytest.raises(Exception):
            action.plugin = "other"

    def test_payload(self):
        payload = Action("ide", "send", {"message": "hi"}).to_payload()
        assert payload == {"plugin": "ide", "action": "send", "params": {"message": "hi"}}


class TestDevice:
    def test_online(self):
        assert Device(id="d1", address="h", online_status="ONLINE").is_online is True

    def test_default_offline(self):
        assert Device(id="d1", address="h").is_online is False


class TestTaskRecord:
    def test_round_trip_keeps_error_payload(self):
        record = TaskRecord(
            id="t1",
            name="chain [1/2] shell.run",
            kind=KIND_CHAIN,
            plugin="shell",
            action="run",
            params={"cmd": "x"},
            status=STATUS_FAILED,
            result={"error": "boom", "code": 7},
            device_id="d1",
            created_at="2026-01-01T00:00:00+00:00",
            error_code="REMOTE_APPLICATION_ERROR",
            duration_ms=12,
        )
        assert TaskRecord.from_dict(record.to_dict()) == record

    def test_from_dict_defaults(self):
        record = TaskRecord.from_dict({"id": "t2"})
        assert record.kind == "SINGLE"
        assert record.status == "PENDING"
        assert record.params == {}
        assert record.duration_ms is None


class TestSummaries:
    def test_step_result_from_dispatch(self):
        action = Action("shell", "run")
        result = DispatchResult(success=False, error="nope", error_code="X", duration_ms=3, task_id="t")
        step = StepResult.from_dispatch(2, action, result)
        assert step.step == 2
        assert step.plugin == "shell"
        assert step.success is False
        assert step.error == "nope"
        assert step.task_id == "t"

    def test_chain_success_requires_all_steps(self):
        assert ChainSummary(name="c", total_steps=2, completed=2, succeeded=2).success is True
        assert ChainSummary(name="c", total_steps=3, completed=2, succeeded=2).success is False
        assert ChainSummary(name="c", total_steps=2, completed=2, succeeded=1, failed=1).success is False
