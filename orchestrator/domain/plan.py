"""Plan model, controller and outcome for interactive plan execution.

Plans are generated elsewhere (AI planning) and only consumed here.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from orchestrator.domain.models import Action

# Plan step statuses
STEP_PENDING = "pending"
STEP_RUNNING = "running"
STEP_DONE = "done"
STEP_FAILED = "failed"

# Defaults used when a generated step does not name its target
DEFAULT_PLAN_PLUGIN = "windsurf"
DEFAULT_PLAN_ACTION = "send-message"


def parse_step_action(
    raw_action: Any,
    description: str,
    params: Optional[Dict[str, Any]] = None,
) -> Action:
    """Build an Action from a generated step.

    ``raw_action`` is either ``"plugin:action"`` text or a dict with
    ``plugin``/``action``/``params`` keys. Missing parts fall back to the
    IDE chat defaults and the description becomes the message.
    """
    if isinstance(raw_action, dict):
        plugin = str(raw_action.get("plugin") or "").strip()
        action = str(raw_action.get("action") or "").strip()
        params = params or raw_action.get("params")
    else:
        text = str(raw_action or "").strip()
        plugin, _, action = text.partition(":")
        plugin, action = plugin.strip(), action.strip()

    if not params:
        params = {"message": description}
    elif not isinstance(params, dict):
        raise ValueError("Plan step params must be an object")

    return Action(
        plugin=plugin or DEFAULT_PLAN_PLUGIN,
        action=action or DEFAULT_PLAN_ACTION,
        params=dict(params),
    )


@dataclass
class PlanAnalysis:
    understood: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    questions: List[str] = field(default_factory=list)


@dataclass
class PlanStep:
    id: str
    description: str
    action: Action
    status: str = STEP_PENDING  # "pending" | "running" | "done" | "failed"
    result: Any = None
    error: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "plugin": self.action.plugin,
            "action": self.action.action,
            "params": dict(self.action.params),
            "status": self.status,
            "result": self.result,
            "error": self.error,
        }


@dataclass
class Plan:
    goal: str
    steps: List[PlanStep]
    ready: bool = False
    analysis: PlanAnalysis = field(default_factory=PlanAnalysis)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Plan":
        """Normalize a generated plan payload into a Plan.

        Raises ValueError when ``steps`` is not a list of objects.
        """
        analysis = payload.get("analysis") or {}
        if not isinstance(analysis, dict):
            analysis = {}
        raw_steps = payload.get("steps") or []
        if not isinstance(raw_steps, list):
            raise ValueError("Plan steps must be a list")
        steps = []
        for idx, raw in enumerate(raw_steps, start=1):
            if not isinstance(raw, dict):
                raise ValueError(f"Plan step {idx} must be an object")
            description = str(raw.get("description", ""))
            steps.append(
                PlanStep(
                    id=str(raw.get("id") or f"step-{idx}"),
                    description=description,
                    action=parse_step_action(raw.get("action"), description, raw.get("params")),
                )
            )
        return cls(
            goal=str(payload.get("goal", "")),
            steps=steps,
            ready=bool(payload.get("ready", False)),
            analysis=PlanAnalysis(
                understood=list(analysis.get("understood") or []),
                missing=list(analysis.get("missing") or []),
                questions=list(analysis.get("questions") or []),
            ),
        )

    def count(self, status: str) -> int:
        return sum(1 for s in self.steps if s.status == status)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "goal": self.goal,
            "ready": self.ready,
            "analysis": {
                "understood": list(self.analysis.understood),
                "missing": list(self.analysis.missing),
                "questions": list(self.analysis.questions),
            },
            "steps": [s.to_dict() for s in self.steps],
        }


class PlanController:
    """Cooperative pause/abort flags for one execution run.

    Flags are only consulted at step boundaries, so a step that has
    started always finishes.
    """

    def __init__(self):
        self.paused = False
        self.aborted = False
        self.current_index = -1

    def pause(self):
        self.paused = True

    def resume(self):
        self.paused = False

    def abort(self):
        # An aborted run must not stay parked in the pause loop
        self.aborted = True
        self.paused = False


@dataclass
class ExecutionOutcome:
    completed_count: int
    total_steps: int
    halted_early: bool
    aborted: bool = False
    failed_step_id: Optional[str] = None
