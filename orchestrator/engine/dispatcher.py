"""Action dispatcher: one remote invocation with a local fallback."""

import asyncio
import sys
import time
from typing import Optional

from orchestrator.config import CONFIG
from orchestrator.domain.errors import (
    DEVICE_NOT_FOUND,
    DEVICE_OFFLINE,
    NETWORK_UNREACHABLE,
    REMOTE_APPLICATION_ERROR,
)
from orchestrator.domain.models import (
    KIND_SINGLE,
    STATUS_FAILED,
    STATUS_SUCCESS,
    Action,
    DispatchResult,
)
from orchestrator.ports.outbound import (
    AgentPort,
    AgentResponse,
    AgentUnreachable,
    DevicePort,
    LedgerPort,
)


def _log(msg: str):
    print(msg, file=sys.stderr)


class ActionDispatcher:
    """Sends an Action to a device's agent and records the outcome.

    Every call writes exactly one task record, whatever happened:
    - unknown device            -> DEVICE_NOT_FOUND, no network call
    - device not online         -> DEVICE_OFFLINE, no network call
    - both endpoints unreachable -> NETWORK_UNREACHABLE
    - agent answered success=false -> REMOTE_APPLICATION_ERROR (never retried)
    - agent call raised otherwise  -> REMOTE_APPLICATION_ERROR (never retried)
    """

    def __init__(
        self,
        agent: AgentPort,
        devices: DevicePort,
        ledger: LedgerPort,
        fallback_host: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ):
        self.agent = agent
        self.devices = devices
        self.ledger = ledger
        self.fallback_host = fallback_host or CONFIG["agent_fallback_host"]
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else CONFIG["dispatch_timeout_seconds"]
        )

    async def dispatch(
        self,
        device_id: str,
        action: Action,
        kind: str = KIND_SINGLE,
        name: Optional[str] = None,
    ) -> DispatchResult:
        task_name = name or action.name
        started = time.monotonic()

        device = self.devices.get(device_id)
        if device is None:
            result = DispatchResult(
                success=False,
                error="Device not found",
                error_code=DEVICE_NOT_FOUND,
            )
            return self._finish(task_name, kind, action, device_id, result)

        if not device.is_online:
            result = DispatchResult(
                success=False,
                error="Device is offline",
                error_code=DEVICE_OFFLINE,
            )
            return self._finish(task_name, kind, action, device_id, result)

        response = await self._invoke(device.address, action, started)
        elapsed_ms = int((time.monotonic() - started) * 1000)

        if response is None:
            result = DispatchResult(
                success=False,
                error="Agent unreachable at device address and fallback host",
                error_code=NETWORK_UNREACHABLE,
                duration_ms=elapsed_ms,
            )
        elif response.success:
            result = DispatchResult(
                success=True,
                data=response.data,
                duration_ms=response.duration_ms if response.duration_ms is not None else elapsed_ms,
            )
        else:
            result = DispatchResult(
                success=False,
                data=response.data,
                error=response.error,
                error_code=REMOTE_APPLICATION_ERROR,
                duration_ms=response.duration_ms if response.duration_ms is not None else elapsed_ms,
            )
        return self._finish(task_name, kind, action, device_id, result)

    async def _invoke(self, address: str, action: Action, started: float) -> Optional[AgentResponse]:
        """Try the device address, then the fallback host, in one timeout budget.

        Returns None when neither endpoint could be reached. Any other error
        from the agent call comes back as a failed response.
        """
        deadline = started + self.timeout_seconds
        hosts = [address]
        if self.fallback_host and self.fallback_host != address:
            hosts.append(self.fallback_host)

        for attempt, host in enumerate(hosts):
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                _log(f"[Dispatcher] timeout budget exhausted before {host}")
                break
            try:
                return await asyncio.wait_for(
                    self.agent.execute(host, action, remaining),
                    timeout=remaining,
                )
            except (AgentUnreachable, asyncio.TimeoutError) as e:
                if attempt + 1 < len(hosts):
                    _log(f"[Dispatcher] agent at {host} not reachable ({e}), trying {hosts[attempt + 1]}")
                else:
                    _log(f"[Dispatcher] agent at {host} not reachable ({e})")
            except Exception as e:
                # Not a reachability error, so the fallback host is not tried
                _log(f"[Dispatcher] agent call to {host} failed: {type(e).__name__}: {e}")
                return AgentResponse(success=False, error=f"Agent call failed: {type(e).__name__}: {e}")
        return None

    def _finish(
        self,
        name: str,
        kind: str,
        action: Action,
        device_id: str,
        result: DispatchResult,
    ) -> DispatchResult:
        entry = self.ledger.record(
            name=name,
            kind=kind,
            action=action,
            status=STATUS_SUCCESS if result.success else STATUS_FAILED,
            result=result.data if result.success else result.error,
            device_id=device_id,
            error_code=result.error_code,
            duration_ms=result.duration_ms,
        )
        result.task_id = entry.id
        if not result.success:
            _log(f"[Dispatcher] {name} on {device_id} failed: {result.error_code} {result.error}")
        return result
