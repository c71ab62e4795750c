"""Chain runner: ordered steps with result threading and error policy."""

import sys
from typing import Any, List, Optional

from orchestrator.domain.models import (
    KIND_CHAIN,
    PREVIOUS_RESULT_KEY,
    Action,
    ChainStep,
    ChainSummary,
    StepResult,
)
from orchestrator.engine.dispatcher import ActionDispatcher

_NO_OUTPUT = object()


def _log(msg: str):
    print(msg, file=sys.stderr)


def prepare_step_action(action: Action, previous_output: Any = _NO_OUTPUT) -> Action:
    """Attach the previous step's output under the reserved params key.

    Leave ``previous_output`` unset when the previous step failed or there
    was none; the step then goes out with its params untouched.
    """
    if previous_output is _NO_OUTPUT:
        return action
    return action.with_params(**{PREVIOUS_RESULT_KEY: previous_output})


class ChainRunner:
    """Runs a chain strictly in order, one step in flight at a time."""

    def __init__(self, dispatcher: ActionDispatcher):
        self.dispatcher = dispatcher

    async def run_chain(
        self,
        device_id: str,
        steps: List[ChainStep],
        name: Optional[str] = None,
    ) -> ChainSummary:
        if not steps:
            raise ValueError("Chain must contain at least one step")

        chain_name = name or f"chain ({len(steps)} steps)"
        summary = ChainSummary(name=chain_name, total_steps=len(steps))
        previous_output: Any = _NO_OUTPUT

        for idx, step in enumerate(steps):
            action = prepare_step_action(step.action, previous_output)
            try:
                result = await self.dispatcher.dispatch(
                    device_id,
                    action,
                    kind=KIND_CHAIN,
                    name=f"{chain_name} [{idx + 1}/{len(steps)}] {action.name}",
                )
            except Exception as e:
                _log(f"[Chain] {chain_name}: step {idx + 1} raised: {e}")
                step_result = StepResult.from_error(idx + 1, action, e)
            else:
                step_result = StepResult.from_dispatch(idx + 1, action, result)
            summary.results.append(step_result)
            summary.completed += 1

            if step_result.success:
                summary.succeeded += 1
                previous_output = step_result.data
                continue

            summary.failed += 1
            previous_output = _NO_OUTPUT
            if not step.continue_on_error:
                _log(f"[Chain] {chain_name}: halted at step {idx + 1}/{len(steps)}")
                break

        return summary
