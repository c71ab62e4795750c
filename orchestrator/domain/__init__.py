"""Domain layer: pure Python, no framework dependencies."""

from orchestrator.domain.errors import (
    DEVICE_NOT_FOUND,
    DEVICE_OFFLINE,
    NETWORK_UNREACHABLE,
    REMOTE_APPLICATION_ERROR,
    InvalidSchedule,
    JobNotFound,
    PlanNotReady,
    PlanRunNotFound,
)
from orchestrator.domain.models import (
    Action,
    BatchSummary,
    ChainStep,
    ChainSummary,
    Device,
    DispatchResult,
    StepResult,
    TaskRecord,
)
from orchestrator.domain.plan import ExecutionOutcome, Plan, PlanController, PlanStep
from orchestrator.domain.schedule import ScheduledJob, ScheduledJobSpec, parse_cron_interval

__all__ = [
    "DEVICE_NOT_FOUND",
    "DEVICE_OFFLINE",
    "NETWORK_UNREACHABLE",
    "REMOTE_APPLICATION_ERROR",
    "InvalidSchedule",
    "JobNotFound",
    "PlanNotReady",
    "PlanRunNotFound",
    "Action",
    "BatchSummary",
    "ChainStep",
    "ChainSummary",
    "Device",
    "DispatchResult",
    "StepResult",
    "TaskRecord",
    "ExecutionOutcome",
    "Plan",
    "PlanController",
    "PlanStep",
    "ScheduledJob",
    "ScheduledJobSpec",
    "parse_cron_interval",
]
