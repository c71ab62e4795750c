"""Global engine instance for the web layer."""

import sys
from typing import Optional

from orchestrator.config import AppConfig
from orchestrator.engine.factory import Engine, build_engine


def _log(msg: str):
    print(msg, file=sys.stderr)


# Module-level singleton
_engine: Optional[Engine] = None


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        config = AppConfig.from_env()
        _log(f"Initializing orchestrator engine (storage: {config.storage_dir})")
        _engine = build_engine(config)
    return _engine


def set_engine(engine: Optional[Engine]):
    """Swap the engine (tests, embedding)."""
    global _engine
    _engine = engine
