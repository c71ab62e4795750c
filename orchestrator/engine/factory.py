"""Wire the engine components together from an AppConfig."""

from dataclasses import dataclass
from typing import Optional

from orchestrator.adapters.agent.http_client import AgentHttpClient
from orchestrator.adapters.devices.registry import DeviceRegistry
from orchestrator.adapters.storage.json_store import JsonStorage
from orchestrator.config import AppConfig
from orchestrator.engine.batch import BatchRunner
from orchestrator.engine.chain import ChainRunner
from orchestrator.engine.dispatcher import ActionDispatcher
from orchestrator.engine.ledger import TaskLedger
from orchestrator.engine.plan_executor import PlanExecutor, PlanRunRegistry
from orchestrator.engine.scheduler import RecurringScheduler
from orchestrator.ports.outbound import AgentPort, StoragePort


@dataclass
class Engine:
    devices: DeviceRegistry
    ledger: TaskLedger
    dispatcher: ActionDispatcher
    chains: ChainRunner
    batches: BatchRunner
    scheduler: RecurringScheduler
    plans: PlanRunRegistry


def build_engine(
    config: Optional[AppConfig] = None,
    storage: Optional[StoragePort] = None,
    agent: Optional[AgentPort] = None,
    devices: Optional[DeviceRegistry] = None,
) -> Engine:
    config = config or AppConfig.from_env()
    storage = storage or JsonStorage(config.storage_dir)
    devices = devices or DeviceRegistry()
    ledger = TaskLedger(
        storage,
        query_limit=config.task_query_limit,
        retention=config.task_retention,
    )
    dispatcher = ActionDispatcher(
        agent=agent or AgentHttpClient(port=config.agent.port),
        devices=devices,
        ledger=ledger,
        fallback_host=config.agent.fallback_host,
        timeout_seconds=config.agent.timeout_seconds,
    )
    executor = PlanExecutor(
        dispatcher,
        settle_delay_seconds=config.plan.settle_delay_seconds,
        pause_poll_seconds=config.plan.pause_poll_seconds,
    )
    return Engine(
        devices=devices,
        ledger=ledger,
        dispatcher=dispatcher,
        chains=ChainRunner(dispatcher),
        batches=BatchRunner(dispatcher, concurrency=config.batch_concurrency),
        scheduler=RecurringScheduler(dispatcher, devices, storage=storage),
        plans=PlanRunRegistry(executor, history=config.plan.run_history),
    )
