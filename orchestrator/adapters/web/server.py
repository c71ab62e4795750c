"""FastAPI application and startup."""

import sys

from fastapi import FastAPI

from orchestrator.adapters.web.routes import api_router
from orchestrator.adapters.web.state import get_engine
from orchestrator.config import CONFIG, __version__

app = FastAPI(title="Agent Orchestrator", version=__version__)
app.include_router(api_router)


def _log(msg: str):
    print(msg, file=sys.stderr)


@app.get("/status")
async def status():
    """Server status endpoint"""
    engine = get_engine()
    return {
        "sessionId": CONFIG["session_id"],
        "devices": len(engine.devices.list()),
        "tasks": len(engine.ledger),
        "schedules": len(engine.scheduler.list()),
        "planRuns": len(engine.plans.list()),
    }


@app.on_event("startup")
async def startup_event():
    """Restore persisted schedules once the event loop is running."""
    _log("Agent orchestrator starting")
    _log(f"Session: {CONFIG['session_id']}")
    restored = get_engine().scheduler.restore()
    if restored:
        _log(f"Restored {restored} scheduled job(s)")
    _log("Ready!")


@app.on_event("shutdown")
async def shutdown_event():
    engine = get_engine()
    await engine.plans.shutdown()
    await engine.scheduler.shutdown()
    _log("Agent orchestrator stopped")
