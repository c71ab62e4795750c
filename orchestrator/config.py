"""Configuration and shared state."""

__version__ = "0.1.0"

import os
import sys
import uuid
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

_stderr_print = lambda *a, **kw: print(*a, **kw, file=sys.stderr)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        _stderr_print(f"Invalid {name}={raw!r}, falling back to {default}")
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        _stderr_print(f"Invalid {name}={raw!r}, falling back to {default}")
        return default


CONFIG = {
    "port": _env_int("PORT", 3000),
    "session_id": str(uuid.uuid4()),
    # Host-control agent
    "agent_port": _env_int("AGENT_PORT", 5100),
    "agent_fallback_host": os.getenv("AGENT_FALLBACK_HOST", "localhost").strip() or "localhost",
    "dispatch_timeout_seconds": _env_float("DISPATCH_TIMEOUT_SECONDS", 30.0),
    # Plan execution
    "plan_settle_delay_seconds": _env_float("PLAN_SETTLE_DELAY_SECONDS", 3.0),
    "plan_pause_poll_seconds": _env_float("PLAN_PAUSE_POLL_SECONDS", 0.5),
    "plan_run_history": max(0, _env_int("PLAN_RUN_HISTORY", 20)),
    # Batch execution, max in-flight dispatches per batch
    "batch_concurrency": max(1, _env_int("BATCH_CONCURRENCY", 4)),
    # Ledger
    "task_query_limit": _env_int("TASK_QUERY_LIMIT", 100),
    # Oldest records beyond this are dropped; 0 keeps everything
    "task_retention": max(0, _env_int("TASK_RETENTION", 1000)),
    "storage_dir": os.getenv("STORAGE_DIR", "memory"),
}


# ── Typed config ────────────────────────────────────────────


@dataclass
class AgentConfig:
    port: int = 5100
    fallback_host: str = "localhost"
    timeout_seconds: float = 30.0


@dataclass
class PlanConfig:
    settle_delay_seconds: float = 3.0
    pause_poll_seconds: float = 0.5
    run_history: int = 20


@dataclass
class AppConfig:
    """Typed configuration used to wire the engine."""

    port: int = 3000
    session_id: str = ""
    storage_dir: str = "memory"
    batch_concurrency: int = 4
    task_query_limit: int = 100
    task_retention: int = 1000
    agent: AgentConfig = field(default_factory=AgentConfig)
    plan: PlanConfig = field(default_factory=PlanConfig)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create AppConfig from environment variables."""
        return cls(
            port=CONFIG["port"],
            session_id=CONFIG["session_id"],
            storage_dir=CONFIG["storage_dir"],
            batch_concurrency=CONFIG["batch_concurrency"],
            task_query_limit=CONFIG["task_query_limit"],
            task_retention=CONFIG["task_retention"],
            agent=AgentConfig(
                port=CONFIG["agent_port"],
                fallback_host=CONFIG["agent_fallback_host"],
                timeout_seconds=CONFIG["dispatch_timeout_seconds"],
            ),
            plan=PlanConfig(
                settle_delay_seconds=CONFIG["plan_settle_delay_seconds"],
                pause_poll_seconds=CONFIG["plan_pause_poll_seconds"],
                run_history=CONFIG["plan_run_history"],
            ),
        )
