"""Orchestration engine: dispatch, ledger, chains, batches, schedules, plans."""

from orchestrator.engine.batch import BatchRunner
from orchestrator.engine.chain import ChainRunner, prepare_step_action
from orchestrator.engine.dispatcher import ActionDispatcher
from orchestrator.engine.ledger import TaskLedger
from orchestrator.engine.plan_executor import PlanExecutor, PlanRun, PlanRunRegistry
from orchestrator.engine.scheduler import RecurringScheduler

__all__ = [
    "ActionDispatcher",
    "BatchRunner",
    "ChainRunner",
    "PlanExecutor",
    "PlanRun",
    "PlanRunRegistry",
    "RecurringScheduler",
    "TaskLedger",
    "prepare_step_action",
]
