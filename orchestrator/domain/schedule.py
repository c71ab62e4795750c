"""Scheduled job model and recurrence parsing.

Pure domain logic, no framework dependencies. Only the "every N minutes"
subset of five-field cron syntax is supported: ``*/N * * * *``.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from orchestrator.domain.errors import InvalidSchedule
from orchestrator.domain.models import Action

_EVERY_N_MINUTES_RE = re.compile(r"^\*/(\d+)\s+\*\s+\*\s+\*\s+\*$")

MS_PER_MINUTE = 60_000


def parse_cron_interval(cron: str) -> int:
    """Return the interval in milliseconds for ``*/N * * * *``.

    Raises InvalidSchedule for any other pattern, or when N is zero.
    """
    s = (cron or "").strip()
    m = _EVERY_N_MINUTES_RE.match(s)
    if not m:
        raise InvalidSchedule(
            f"Invalid cron format: {s!r}. Use */n * * * * for an n minute interval"
        )
    minutes = int(m.group(1))
    if minutes < 1:
        raise InvalidSchedule(f"Interval must be at least 1 minute (got {s!r})")
    return minutes * MS_PER_MINUTE


@dataclass
class ScheduledJob:
    """A recurring dispatch bound to one timer.

    ``timer`` is owned by the scheduler; it is cancelled before the job is
    released.
    """

    id: str
    name: str
    cron: str
    interval_ms: int
    action: Action
    device_id: str
    enabled: bool = True
    created_at: str = ""  # ISO datetime
    last_run: str = ""  # ISO datetime or empty
    next_run: str = ""  # ISO datetime or empty
    timer: Optional[Any] = field(default=None, repr=False, compare=False)

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000

    def to_dict(self) -> Dict[str, Any]:
        """Serializable view, everything but the timer handle."""
        return {
            "id": self.id,
            "name": self.name,
            "cron": self.cron,
            "interval_ms": self.interval_ms,
            "plugin": self.action.plugin,
            "action": self.action.action,
            "params": dict(self.action.params),
            "device_id": self.device_id,
            "enabled": self.enabled,
            "created_at": self.created_at,
            "last_run": self.last_run,
            "next_run": self.next_run,
        }


@dataclass
class ScheduledJobSpec:
    """What a caller supplies to register a job."""

    name: str
    cron: str
    action: Action
    device_id: str
    enabled: bool = True
    id: Optional[str] = None  # set when restoring a persisted job

    @classmethod
    def from_dict(cls, item: Dict[str, Any]) -> "ScheduledJobSpec":
        return cls(
            name=str(item.get("name", "")),
            cron=str(item.get("cron", "")),
            action=Action(
                plugin=str(item.get("plugin", "")),
                action=str(item.get("action", "")),
                params=dict(item.get("params") or {}),
            ),
            device_id=str(item.get("device_id", "")),
            enabled=bool(item.get("enabled", True)),
            id=item.get("id"),
        )
