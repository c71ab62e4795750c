"""Agent Orchestrator: task dispatch and orchestration for host-control agents."""

from orchestrator.config import CONFIG, AppConfig, __version__
from orchestrator.domain.models import Action, ChainStep, Device, TaskRecord
from orchestrator.domain.plan import Plan, PlanController
from orchestrator.domain.schedule import ScheduledJobSpec
from orchestrator.engine.factory import Engine, build_engine

__all__ = [
    "CONFIG",
    "AppConfig",
    "__version__",
    "Action",
    "ChainStep",
    "Device",
    "TaskRecord",
    "Plan",
    "PlanController",
    "ScheduledJobSpec",
    "Engine",
    "build_engine",
]
