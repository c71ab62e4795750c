"""Port interfaces (Hexagonal Architecture)."""

from orchestrator.ports.outbound import (
    AgentPort,
    AgentResponse,
    AgentUnreachable,
    DevicePort,
    LedgerPort,
    StoragePort,
)

__all__ = [
    "AgentPort",
    "AgentResponse",
    "AgentUnreachable",
    "DevicePort",
    "LedgerPort",
    "StoragePort",
]
