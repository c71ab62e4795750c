"""Batch runner: independent actions, outcomes collected per item."""

import asyncio
import sys
from typing import List, Optional

from orchestrator.config import CONFIG
from orchestrator.domain.models import KIND_BATCH, Action, BatchSummary, StepResult
from orchestrator.engine.dispatcher import ActionDispatcher


def _log(msg: str):
    print(msg, file=sys.stderr)


class BatchRunner:
    def __init__(self, dispatcher: ActionDispatcher, concurrency: Optional[int] = None):
        self.dispatcher = dispatcher
        self.concurrency = max(1, concurrency if concurrency is not None else CONFIG["batch_concurrency"])

    async def run_batch(self, device_id: str, actions: List[Action]) -> BatchSummary:
        """Dispatch every action and wait for all of them. Results keep input order."""
        if not actions:
            raise ValueError("Batch must contain at least one action")

        semaphore = asyncio.Semaphore(self.concurrency)

        async def _run_one(idx: int, action: Action) -> StepResult:
            async with semaphore:
                try:
                    result = await self.dispatcher.dispatch(device_id, action, kind=KIND_BATCH)
                except Exception as e:
                    _log(f"[Batch] item {idx + 1} ({action.name}) raised: {e}")
                    return StepResult.from_error(idx + 1, action, e)
            return StepResult.from_dispatch(idx + 1, action, result)

        results = await asyncio.gather(*(_run_one(i, a) for i, a in enumerate(actions)))

        succeeded = sum(1 for r in results if r.success)
        return BatchSummary(
            total=len(actions),
            succeeded=succeeded,
            failed=len(actions) - succeeded,
            results=list(results),
        )
