"""Task orchestration API routes."""

from dataclasses import asdict
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from orchestrator.adapters.web.state import get_engine
from orchestrator.domain.errors import (
    DEVICE_NOT_FOUND,
    DEVICE_OFFLINE,
    InvalidSchedule,
    JobNotFound,
    PlanNotReady,
    PlanRunNotFound,
)
from orchestrator.domain.models import TASK_KINDS, TASK_STATUSES, Action, ChainStep
from orchestrator.domain.plan import Plan
from orchestrator.domain.schedule import ScheduledJobSpec
from orchestrator.engine.plan_executor import PlanRun

api_router = APIRouter(prefix="/api", tags=["Orchestrator"])


# Request models


class RegisterDeviceRequest(BaseModel):
    deviceId: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    hostname: str = ""


class HeartbeatRequest(BaseModel):
    deviceId: str = Field(..., min_length=1)


class ActionRequest(BaseModel):
    plugin: str = Field(..., min_length=1)
    action: str = Field(..., min_length=1)
    params: Dict[str, Any] = Field(default_factory=dict)

    def to_action(self) -> Action:
        try:
            return Action(plugin=self.plugin, action=self.action, params=dict(self.params))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))


class ChainTaskRequest(ActionRequest):
    continueOnError: bool = False


class ChainRequest(BaseModel):
    deviceId: str
    name: Optional[str] = None
    tasks: List[ChainTaskRequest]


class BatchRequest(BaseModel):
    deviceId: str
    tasks: List[ActionRequest]


class ScheduleRequest(ActionRequest):
    name: str = Field(..., min_length=1)
    cron: str = Field(..., min_length=1)
    deviceId: str = Field(..., min_length=1)


class ScheduleToggleRequest(BaseModel):
    id: str
    enabled: bool


class PlanExecuteRequest(BaseModel):
    deviceId: str
    plan: Dict[str, Any]


# Helpers


def _require_online_device(device_id: str):
    device = get_engine().devices.get(device_id)
    if device is None:
        raise HTTPException(status_code=404, detail="Device not found")
    if not device.is_online:
        raise HTTPException(status_code=400, detail="Device is offline")
    return device


def _run_to_dict(run: PlanRun) -> Dict[str, Any]:
    return {
        "id": run.id,
        "deviceId": run.device_id,
        "state": run.state,
        "startedAt": run.started_at,
        "currentIndex": run.controller.current_index,
        "paused": run.controller.paused,
        "aborted": run.controller.aborted,
        "outcome": asdict(run.outcome) if run.outcome else None,
        "error": run.error,
        "plan": run.plan.to_dict(),
    }


# Devices


@api_router.post("/agents/register")
async def register_agent(req: RegisterDeviceRequest):
    device = get_engine().devices.register(req.deviceId, req.address, hostname=req.hostname)
    return {"success": True, "data": asdict(device)}


@api_router.post("/agents/heartbeat")
async def agent_heartbeat(req: HeartbeatRequest):
    if not get_engine().devices.heartbeat(req.deviceId):
        raise HTTPException(status_code=404, detail="Device not found")
    return {"success": True}


@api_router.get("/agents")
async def list_agents():
    return {"success": True, "data": [asdict(d) for d in get_engine().devices.list()]}


@api_router.post("/agents/{device_id}/execute")
async def execute_action(device_id: str, req: ActionRequest):
    result = await get_engine().dispatcher.dispatch(device_id, req.to_action())
    body = {
        "success": result.success,
        "data": result.data,
        "error": result.error,
        "errorCode": result.error_code,
        "duration": result.duration_ms,
        "taskId": result.task_id,
    }
    if result.error_code == DEVICE_NOT_FOUND:
        return JSONResponse(status_code=404, content=body)
    if result.error_code == DEVICE_OFFLINE:
        return JSONResponse(status_code=400, content=body)
    return body


# Task ledger


@api_router.get("/tasks")
async def list_tasks(
    deviceId: Optional[str] = None,
    status: Optional[str] = None,
    kind: Optional[str] = None,
    limit: Optional[int] = None,
):
    if status and status not in TASK_STATUSES:
        raise HTTPException(status_code=400, detail=f"Unknown status: {status}")
    if kind and kind not in TASK_KINDS:
        raise HTTPException(status_code=400, detail=f"Unknown kind: {kind}")
    records = get_engine().ledger.query(device_id=deviceId, status=status, kind=kind, limit=limit)
    return {"success": True, "data": [r.to_dict() for r in records]}


# Chains and batches (registered before /tasks/{task_id} so the paths win)


@api_router.post("/tasks/chain")
async def run_chain(req: ChainRequest):
    if not req.tasks:
        raise HTTPException(status_code=400, detail="Tasks array is required")
    _require_online_device(req.deviceId)
    steps = [ChainStep(action=t.to_action(), continue_on_error=t.continueOnError) for t in req.tasks]
    summary = await get_engine().chains.run_chain(req.deviceId, steps, name=req.name)
    data = asdict(summary)
    data["success"] = summary.success
    return {"success": summary.success, "data": data}


@api_router.post("/tasks/batch")
async def run_batch(req: BatchRequest):
    if not req.tasks:
        raise HTTPException(status_code=400, detail="Tasks array is required")
    _require_online_device(req.deviceId)
    summary = await get_engine().batches.run_batch(req.deviceId, [t.to_action() for t in req.tasks])
    return {"success": True, "data": asdict(summary)}


# Schedules


@api_router.get("/tasks/schedule")
async def list_schedules():
    return {"success": True, "data": [j.to_dict() for j in get_engine().scheduler.list()]}


@api_router.post("/tasks/schedule")
async def create_schedule(req: ScheduleRequest):
    spec = ScheduledJobSpec(
        name=req.name,
        cron=req.cron,
        action=req.to_action(),
        device_id=req.deviceId,
    )
    try:
        job = get_engine().scheduler.register(spec)
    except InvalidSchedule as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "data": job.to_dict()}


@api_router.patch("/tasks/schedule")
async def toggle_schedule(req: ScheduleToggleRequest):
    try:
        job = get_engine().scheduler.set_enabled(req.id, req.enabled)
    except JobNotFound:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"success": True, "data": {"id": job.id, "enabled": job.enabled}}


@api_router.delete("/tasks/schedule")
async def delete_schedule(id: Optional[str] = None):
    if not id:
        raise HTTPException(status_code=400, detail="Task ID is required")
    try:
        get_engine().scheduler.unregister(id)
    except JobNotFound:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"success": True}


@api_router.get("/tasks/{task_id}")
async def get_task(task_id: str):
    record = get_engine().ledger.get(task_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"success": True, "data": record.to_dict()}


# Plans


@api_router.post("/plans/execute")
async def execute_plan(req: PlanExecuteRequest):
    _require_online_device(req.deviceId)
    try:
        plan = Plan.from_dict(req.plan)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not plan.steps:
        raise HTTPException(status_code=400, detail="Plan has no steps")
    try:
        run = get_engine().plans.start(req.deviceId, plan)
    except PlanNotReady as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"success": True, "data": _run_to_dict(run)}


@api_router.get("/plans")
async def list_plan_runs():
    return {"success": True, "data": [_run_to_dict(r) for r in get_engine().plans.list()]}


@api_router.get("/plans/{run_id}")
async def get_plan_run(run_id: str):
    try:
        run = get_engine().plans.get(run_id)
    except PlanRunNotFound:
        raise HTTPException(status_code=404, detail="Plan run not found")
    return {"success": True, "data": _run_to_dict(run)}


@api_router.post("/plans/{run_id}/{command}")
async def control_plan_run(run_id: str, command: str):
    plans = get_engine().plans
    handlers = {"pause": plans.pause, "resume": plans.resume, "abort": plans.abort}
    handler = handlers.get(command)
    if handler is None:
        raise HTTPException(status_code=404, detail=f"Unknown command: {command}")
    try:
        run = handler(run_id)
    except PlanRunNotFound:
        raise HTTPException(status_code=404, detail="Plan run not found")
    return {"success": True, "data": _run_to_dict(run)}
