"""Outbound ports: interfaces for external system adapters."""

from dataclasses import dataclass
from typing import Any, List, Optional, Protocol, runtime_checkable

from orchestrator.domain.models import Action, Device


class AgentUnreachable(Exception):
    """Transport-level failure talking to an agent (no application response)."""
    pass


@dataclass
class AgentResponse:
    """Application-level response from the host-control agent."""

    success: bool
    data: Any = None
    error: Any = None
    duration_ms: Optional[int] = None


@runtime_checkable
class AgentPort(Protocol):
    """Interface for invoking an action on a host-control agent.

    Implementations raise AgentUnreachable for connectivity failures and
    return an AgentResponse for anything the agent answered.
    """

    async def execute(self, host: str, action: Action, timeout: float) -> AgentResponse: ...


@runtime_checkable
class DevicePort(Protocol):
    """Read access to the device registry."""

    def get(self, device_id: str) -> Optional[Device]: ...


@runtime_checkable
class StoragePort(Protocol):
    """Interface for persistent storage."""

    def load(self, key: str) -> list: ...
    def save(self, key: str, data: list) -> None: ...


@runtime_checkable
class LedgerPort(Protocol):
    """Append-only task record sink."""

    def record(
        self,
        name: str,
        kind: str,
        action: Action,
        status: str,
        result: Any,
        device_id: str,
        error_code: Optional[str] = None,
        duration_ms: Optional[int] = None,
    ) -> Any: ...

    def query(
        self,
        device_id: Optional[str] = None,
        status: Optional[str] = None,
        kind: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Any]: ...

