"""Interactive plan executor: pausable, abortable step-by-step execution."""

import asyncio
import sys
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, List, Optional

from orchestrator.config import CONFIG
from orchestrator.domain.errors import PlanNotReady, PlanRunNotFound
from orchestrator.domain.plan import (
    STEP_DONE,
    STEP_FAILED,
    STEP_RUNNING,
    ExecutionOutcome,
    Plan,
    PlanController,
)
from orchestrator.engine.dispatcher import ActionDispatcher


def _log(msg: str):
    print(msg, file=sys.stderr)


class PlanExecutor:
    """Runs a ready plan one step at a time.

    Pause and abort are honoured only between steps. Any failed step is
    fatal to the run. Successful steps are followed by a settle delay so
    the interactive target can catch up before the next input.
    """

    def __init__(
        self,
        dispatcher: ActionDispatcher,
        settle_delay_seconds: Optional[float] = None,
        pause_poll_seconds: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.dispatcher = dispatcher
        self.settle_delay_seconds = (
            settle_delay_seconds
            if settle_delay_seconds is not None
            else CONFIG["plan_settle_delay_seconds"]
        )
        self.pause_poll_seconds = (
            pause_poll_seconds if pause_poll_seconds is not None else CONFIG["plan_pause_poll_seconds"]
        )
        self._sleep = sleep

    async def execute(
        self,
        device_id: str,
        plan: Plan,
        controller: Optional[PlanController] = None,
    ) -> ExecutionOutcome:
        if not plan.ready:
            raise PlanNotReady("Plan is not ready for execution")

        controller = controller or PlanController()
        total = len(plan.steps)
        failed_step_id: Optional[str] = None
        _log(f"[Plan] executing {total} steps: {plan.goal}")

        for idx, step in enumerate(plan.steps):
            if controller.aborted:
                break

            while controller.paused and not controller.aborted:
                await self._sleep(self.pause_poll_seconds)

            if controller.aborted:
                break

            controller.current_index = idx
            step.status = STEP_RUNNING
            _log(f"[Plan] step {idx + 1}/{total}: {step.description}")

            try:
                result = await self.dispatcher.dispatch(device_id, step.action)
            except Exception as e:
                _log(f"[Plan] step {idx + 1} request failed: {e}")
                step.status = STEP_FAILED
                step.error = f"Request failed: {e}"
                failed_step_id = step.id
                break

            if not result.success:
                step.status = STEP_FAILED
                step.error = result.error
                failed_step_id = step.id
                _log(f"[Plan] step {idx + 1} failed: {result.error}")
                break

            step.status = STEP_DONE
            step.result = result.data

            if idx < total - 1:
                await self._sleep(self.settle_delay_seconds)

        controller.current_index = -1
        completed = plan.count(STEP_DONE)
        if controller.aborted:
            _log(f"[Plan] aborted after {completed}/{total} steps")
        elif completed < total:
            _log(f"[Plan] partially completed ({completed}/{total})")
        else:
            _log("[Plan] all steps completed")

        return ExecutionOutcome(
            completed_count=completed,
            total_steps=total,
            halted_early=completed < total,
            aborted=controller.aborted,
            failed_step_id=failed_step_id,
        )


@dataclass
class PlanRun:
    """A plan execution started in the background."""

    id: str
    device_id: str
    plan: Plan
    controller: PlanController
    started_at: str
    task: Optional[asyncio.Task] = field(default=None, repr=False)
    outcome: Optional[ExecutionOutcome] = None
    error: Optional[str] = None

    @property
    def state(self) -> str:
        if self.task is not None and not self.task.done():
            if self.controller.aborted:
                return "aborting"
            return "paused" if self.controller.paused else "running"
        if self.error:
            return "error"
        if self.outcome and self.outcome.aborted:
            return "aborted"
        return "finished"


class PlanRunRegistry:
    """Keeps plan runs addressable by id so they can be controlled later.

    Active runs are always kept. Of the finished ones only the newest
    ``history`` survive; older ones are evicted when a new run starts.
    """

    def __init__(self, executor: PlanExecutor, history: Optional[int] = None):
        self.executor = executor
        self.history = history if history is not None else CONFIG["plan_run_history"]
        self._runs: Dict[str, PlanRun] = {}

    def start(self, device_id: str, plan: Plan) -> PlanRun:
        if not plan.ready:
            raise PlanNotReady("Plan is not ready for execution")
        run = PlanRun(
            id=f"plan-{uuid.uuid4().hex[:8]}",
            device_id=device_id,
            plan=plan,
            controller=PlanController(),
            started_at=datetime.now(timezone.utc).isoformat(),
        )
        self._evict_finished()
        run.task = asyncio.create_task(self._run(run))
        self._runs[run.id] = run
        return run

    def _evict_finished(self):
        finished = [r.id for r in self._runs.values() if r.task is not None and r.task.done()]
        for run_id in finished[: max(0, len(finished) - self.history)]:
            del self._runs[run_id]

    async def _run(self, run: PlanRun):
        try:
            run.outcome = await self.executor.execute(run.device_id, run.plan, run.controller)
        except Exception as e:
            run.error = str(e)
            _log(f"[Plan] run {run.id} crashed: {e}")

    def get(self, run_id: str) -> PlanRun:
        run = self._runs.get(run_id)
        if run is None:
            raise PlanRunNotFound(f"Plan run not found: {run_id}")
        return run

    def list(self) -> List[PlanRun]:
        return list(self._runs.values())

    def pause(self, run_id: str) -> PlanRun:
        run = self.get(run_id)
        run.controller.pause()
        return run

    def resume(self, run_id: str) -> PlanRun:
        run = self.get(run_id)
        run.controller.resume()
        return run

    def abort(self, run_id: str) -> PlanRun:
        run = self.get(run_id)
        run.controller.abort()
        return run

    async def wait(self, run_id: str) -> Optional[ExecutionOutcome]:
        run = self.get(run_id)
        if run.task is not None:
            await run.task
        return run.outcome

    async def shutdown(self):
        """Abort every active run and wait for in-flight steps to finish."""
        pending = []
        for run in self._runs.values():
            if run.task is not None and not run.task.done():
                run.controller.abort()
                pending.append(run.task)
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
