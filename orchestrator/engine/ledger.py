"""Task ledger: append-only record of every dispatch."""

import sys
import uuid
from datetime import datetime, timezone
from typing import Any, List, Optional

from orchestrator.config import CONFIG
from orchestrator.domain.models import Action, TaskRecord
from orchestrator.ports.outbound import StoragePort

_STORAGE_KEY = "tasks"


def _log(msg: str):
    print(msg, file=sys.stderr)


class TaskLedger:
    """Append-only task records, persisted through a StoragePort.

    Records are never updated in place: two identical dispatches always
    produce two records. Only the newest ``retention`` records are kept.
    """

    def __init__(
        self,
        storage: StoragePort,
        query_limit: Optional[int] = None,
        retention: Optional[int] = None,
    ):
        self._storage = storage
        self._query_limit = query_limit if query_limit is not None else CONFIG["task_query_limit"]
        self._retention = retention if retention is not None else CONFIG["task_retention"]
        self._records: List[TaskRecord] = []
        self._load()

    def record(
        self,
        name: str,
        kind: str,
        action: Action,
        status: str,
        result: Any,
        device_id: str,
        error_code: Optional[str] = None,
        duration_ms: Optional[int] = None,
    ) -> TaskRecord:
        """Append one record and persist the ledger."""
        entry = TaskRecord(
            id=uuid.uuid4().hex,
            name=name,
            kind=kind,
            plugin=action.plugin,
            action=action.action,
            params=dict(action.params),
            status=status,
            result=result,
            device_id=device_id,
            created_at=datetime.now(timezone.utc).isoformat(),
            error_code=error_code,
            duration_ms=duration_ms,
        )
        self._records.append(entry)
        self._trim()
        self._save()
        return entry

    def get(self, task_id: str) -> Optional[TaskRecord]:
        for entry in self._records:
            if entry.id == task_id:
                return entry
        return None

    def query(
        self,
        device_id: Optional[str] = None,
        status: Optional[str] = None,
        kind: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[TaskRecord]:
        """Return matching records, newest first."""
        cap = limit if limit is not None else self._query_limit
        matched = []
        for entry in reversed(self._records):
            if device_id and entry.device_id != device_id:
                continue
            if status and entry.status != status:
                continue
            if kind and entry.kind != kind:
                continue
            matched.append(entry)
            if cap and len(matched) >= cap:
                break
        return matched

    def __len__(self) -> int:
        return len(self._records)

    def _load(self):
        for item in self._storage.load(_STORAGE_KEY):
            if isinstance(item, dict) and "id" in item:
                try:
                    self._records.append(TaskRecord.from_dict(item))
                except (TypeError, ValueError) as e:
                    _log(f"[TaskLedger] skipping bad record {item.get('id')!r}: {e}")
        self._trim()

    def _trim(self):
        if self._retention and len(self._records) > self._retention:
            del self._records[: len(self._records) - self._retention]

    def _save(self):
        # A failed write must not turn a finished dispatch into an error
        try:
            self._storage.save(_STORAGE_KEY, [r.to_dict() for r in self._records])
        except Exception as e:
            _log(f"[TaskLedger] save failed: {e}")
