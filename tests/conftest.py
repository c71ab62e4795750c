"""Shared fakes for engine tests: agent, device registry, manual clock."""

import asyncio
import heapq
from datetime import datetime, timedelta, timezone

import pytest

from orchestrator.adapters.devices.registry import DeviceRegistry
from orchestrator.adapters.storage.json_store import MemoryStorage
from orchestrator.domain.models import DEVICE_OFFLINE, DEVICE_ONLINE, Device
from orchestrator.engine.dispatcher import ActionDispatcher
from orchestrator.engine.ledger import TaskLedger
from orchestrator.ports.outbound import AgentResponse, AgentUnreachable


class FakeAgent:
    """Records every call. Responses are consumed in order, then default to success."""

    def __init__(self, responses=None, unreachable_hosts=()):
        self.calls = []
        self.responses = list(responses or [])
        self.unreachable_hosts = set(unreachable_hosts)
        self.handler = None

    async def execute(self, host, action, timeout):
        self.calls.append((host, action))
        if host in self.unreachable_hosts:
            raise AgentUnreachable(f"{host} refused connection")
        if self.handler is not None:
            return self.handler(host, action)
        if self.responses:
            return self.responses.pop(0)
        return AgentResponse(success=True, data={"ok": True}, duration_ms=5)


async def drain(rounds: int = 20):
    """Let pending tasks run until they block again."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeClock:
    """Manual time: ``sleep`` parks until ``advance`` moves past its deadline."""

    def __init__(self):
        self.now = 0.0
        self.base = datetime(2026, 1, 1, tzinfo=timezone.utc)
        self._waiters = []
        self._seq = 0

    async def sleep(self, seconds):
        fut = asyncio.get_running_loop().create_future()
        self._seq += 1
        heapq.heappush(self._waiters, (self.now + seconds, self._seq, fut))
        await fut

    def datetime(self) -> datetime:
        return self.base + timedelta(seconds=self.now)

    async def advance(self, seconds):
        target = self.now + seconds
        await drain()
        while self._waiters and self._waiters[0][0] <= target:
            deadline, _, fut = heapq.heappop(self._waiters)
            if fut.done():
                continue
            self.now = deadline
            fut.set_result(None)
            await drain()
        self.now = target


@pytest.fixture
def agent():
    return FakeAgent()


@pytest.fixture
def devices():
    return DeviceRegistry([
        Device(id="d1", address="10.0.0.5", online_status=DEVICE_ONLINE, hostname="ws-1"),
        Device(id="d2", address="10.0.0.6", online_status=DEVICE_OFFLINE, hostname="ws-2"),
    ])


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def ledger(storage):
    return TaskLedger(storage, query_limit=100)


@pytest.fixture
def dispatcher(agent, devices, ledger):
    return ActionDispatcher(
        agent=agent,
        devices=devices,
        ledger=ledger,
        fallback_host="localhost",
        timeout_seconds=5.0,
    )


@pytest.fixture
def clock():
    return FakeClock()
