"""Host-control agent client using aiohttp."""

import asyncio
from typing import Any, Optional

import aiohttp

from orchestrator.config import CONFIG
from orchestrator.domain.models import Action
from orchestrator.ports.outbound import AgentResponse, AgentUnreachable


def parse_agent_response(payload: Any, http_status: int = 200) -> AgentResponse:
    """Normalize the agent's ``{success, data?, error?, duration?}`` body."""
    if not isinstance(payload, dict):
        return AgentResponse(success=False, error=f"Unexpected agent response (HTTP {http_status})")
    duration = payload.get("duration", payload.get("durationMs"))
    try:
        duration_ms: Optional[int] = int(duration) if duration is not None else None
    except (TypeError, ValueError):
        duration_ms = None
    return AgentResponse(
        success=bool(payload.get("success", False)),
        data=payload.get("data"),
        error=payload.get("error"),
        duration_ms=duration_ms,
    )


class AgentHttpClient:
    """Async client for the agent's ``POST /execute`` endpoint."""

    def __init__(self, port: Optional[int] = None):
        self.port = port if port is not None else CONFIG["agent_port"]

    def execute_url(self, host: str) -> str:
        return f"http://{host}:{self.port}/execute"

    async def execute(self, host: str, action: Action, timeout: float) -> AgentResponse:
        url = self.execute_url(host)
        client_timeout = aiohttp.ClientTimeout(total=timeout)
        try:
            async with aiohttp.ClientSession(timeout=client_timeout) as session:
                async with session.post(url, json=action.to_payload()) as resp:
                    try:
                        data = await resp.json(content_type=None)
                    except ValueError:
                        text = await resp.text(errors="replace")
                        return AgentResponse(
                            success=False,
                            error=f"HTTP {resp.status}: {text[:200]}",
                        )
                    return parse_agent_response(data, resp.status)
        except asyncio.TimeoutError as e:
            raise AgentUnreachable(f"{url}: timeout ({timeout:.1f}s)") from e
        except aiohttp.ClientError as e:
            raise AgentUnreachable(f"{url}: {e}") from e
