"""Domain data models: pure Python dataclasses."""

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, List, Optional

# Task kinds
KIND_SINGLE = "SINGLE"
KIND_BATCH = "BATCH"
KIND_CHAIN = "CHAIN"
KIND_SCHEDULED = "SCHEDULED"
TASK_KINDS = (KIND_SINGLE, KIND_BATCH, KIND_CHAIN, KIND_SCHEDULED)

# Task statuses
STATUS_PENDING = "PENDING"
STATUS_RUNNING = "RUNNING"
STATUS_SUCCESS = "SUCCESS"
STATUS_FAILED = "FAILED"
TASK_STATUSES = (STATUS_PENDING, STATUS_RUNNING, STATUS_SUCCESS, STATUS_FAILED)

# Device reachability
DEVICE_ONLINE = "ONLINE"
DEVICE_OFFLINE = "OFFLINE"

# Params key carrying the previous chain step's output to the agent
PREVIOUS_RESULT_KEY = "previousResult"


@dataclass(frozen=True)
class Action:
    """One command for the host-control agent."""

    plugin: str
    action: str
    params: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.plugin or not str(self.plugin).strip():
            raise ValueError("Action plugin must not be empty")
        if not self.action or not str(self.action).strip():
            raise ValueError("Action name must not be empty")

    @property
    def name(self) -> str:
        return f"{self.plugin}.{self.action}"

    def with_params(self, **extra: Any) -> "Action":
        """Return a copy whose params are merged with ``extra``."""
        return replace(self, params={**self.params, **extra})

    def to_payload(self) -> Dict[str, Any]:
        return {"plugin": self.plugin, "action": self.action, "params": dict(self.params)}


@dataclass
class Device:
    """Read-only view of a registered host-control agent."""

    id: str
    address: str
    online_status: str = DEVICE_OFFLINE  # "ONLINE" | "OFFLINE"
    hostname: str = ""
    last_seen: str = ""  # ISO datetime or empty

    @property
    def is_online(self) -> bool:
        return self.online_status == DEVICE_ONLINE


@dataclass
class TaskRecord:
    """Append-only record of one dispatch outcome."""

    id: str
    name: str
    kind: str  # one of TASK_KINDS
    plugin: str
    action: str
    params: Dict[str, Any]
    status: str  # one of TASK_STATUSES
    result: Any  # data on success, error payload on failure
    device_id: str
    created_at: str  # ISO datetime
    error_code: Optional[str] = None
    duration_ms: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, item: Dict[str, Any]) -> "TaskRecord":
        duration = item.get("duration_ms")
        return cls(
            id=str(item["id"]),
            name=str(item.get("name", "")),
            kind=str(item.get("kind", KIND_SINGLE)),
            plugin=str(item.get("plugin", "")),
            action=str(item.get("action", "")),
            params=dict(item.get("params") or {}),
            status=str(item.get("status", STATUS_PENDING)),
            result=item.get("result"),
            device_id=str(item.get("device_id", "")),
            created_at=str(item.get("created_at", "")),
            error_code=item.get("error_code"),
            duration_ms=int(duration) if duration is not None else None,
        )


@dataclass
class DispatchResult:
    """Normalized outcome of one dispatch."""

    success: bool
    data: Any = None
    error: Any = None
    error_code: Optional[str] = None
    duration_ms: int = 0
    task_id: Optional[str] = None


@dataclass
class ChainStep:
    action: Action
    continue_on_error: bool = False


@dataclass
class StepResult:
    """Per-step (chain) or per-item (batch) outcome."""

    step: int  # 1-based position in the submitted list
    plugin: str
    action: str
    success: bool
    data: Any = None
    error: Any = None
    error_code: Optional[str] = None
    duration_ms: int = 0
    task_id: Optional[str] = None

    @classmethod
    def from_dispatch(cls, step: int, action: Action, result: DispatchResult) -> "StepResult":
        return cls(
            step=step,
            plugin=action.plugin,
            action=action.action,
            success=result.success,
            data=result.data,
            error=result.error,
            error_code=result.error_code,
            duration_ms=result.duration_ms,
            task_id=result.task_id,
        )

    @classmethod
    def from_error(cls, step: int, action: Action, error: Exception) -> "StepResult":
        """Outcome for a step whose dispatch raised instead of returning."""
        return cls(
            step=step,
            plugin=action.plugin,
            action=action.action,
            success=False,
            error=f"Request failed: {error}",
        )


@dataclass
class ChainSummary:
    name: str
    total_steps: int
    completed: int = 0
    succeeded: int = 0
    failed: int = 0
    results: List[StepResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.failed == 0 and self.completed == self.total_steps


@dataclass
class BatchSummary:
    total: int
    succeeded: int = 0
    failed: int = 0
    results: List[StepResult] = field(default_factory=list)
