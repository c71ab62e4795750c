"""Tests for BatchRunner: independent items, aggregate counts."""

import asyncio

import pytest

from orchestrator.domain.models import KIND_BATCH, Action
from orchestrator.engine.batch import BatchRunner
from orchestrator.ports.outbound import AgentResponse

ACTIONS = [
    Action("window-control", "list"),
    Action("window-control", "minimize", {"title": "Mail"}),
    Action("shell", "run", {"cmd": "whoami"}),
]


class TestRunBatch:
    @pytest.mark.asyncio
    async def test_failure_does_not_affect_others(self, dispatcher, agent, ledger):
        def handler(host, action):
            if action.action == "minimize":
                return AgentResponse(success=False, error="window not found")
            return AgentResponse(success=True, data=action.name)

        agent.handler = handler
        summary = await BatchRunner(dispatcher, concurrency=2).run_batch("d1", ACTIONS)

        assert summary.total == 3
        assert summary.succeeded == 2
        assert summary.failed == 1
        assert [r.action for r in summary.results] == ["list", "minimize", "run"]
        assert summary.results[1].error == "window not found"
        assert summary.results[2].data == "shell.run"
        assert len(ledger.query(kind=KIND_BATCH)) == 3

    @pytest.mark.asyncio
    async def test_agent_exception_fails_only_its_item(self, dispatcher, agent, ledger):
        def handler(host, action):
            if action.action == "minimize":
                raise RuntimeError("agent sent garbage")
            return AgentResponse(success=True, data=action.name)

        agent.handler = handler
        summary = await BatchRunner(dispatcher).run_batch("d1", ACTIONS)

        assert summary.total == 3
        assert summary.succeeded == 2
        assert summary.failed == 1
        assert "agent sent garbage" in summary.results[1].error
        assert summary.results[1].task_id is not None
        assert len(ledger.query(kind=KIND_BATCH)) == 3

    @pytest.mark.asyncio
    async def test_dispatcher_exception_fails_only_its_item(self, dispatcher):
        real_dispatch = dispatcher.dispatch

        async def flaky_dispatch(device_id, action, **kwargs):
            if action.plugin == "shell":
                raise RuntimeError("ledger unavailable")
            return await real_dispatch(device_id, action, **kwargs)

        dispatcher.dispatch = flaky_dispatch
        summary = await BatchRunner(dispatcher).run_batch("d1", ACTIONS)

        assert summary.succeeded == 2
        assert summary.results[2].success is False
        assert summary.results[2].error == "Request failed: ledger unavailable"

    @pytest.mark.asyncio
    async def test_concurrency_limit(self, dispatcher, agent):
        in_flight = 0
        peak = 0

        async def slow_execute(host, action, timeout):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return AgentResponse(success=True)

        agent.execute = slow_execute
        summary = await BatchRunner(dispatcher, concurrency=2).run_batch("d1", ACTIONS * 2)
        assert summary.succeeded == 6
        assert peak <= 2

    @pytest.mark.asyncio
    async def test_offline_device_fails_every_item(self, dispatcher, agent):
        summary = await BatchRunner(dispatcher).run_batch("d2", ACTIONS)
        assert summary.failed == 3
        assert agent.calls == []

    @pytest.mark.asyncio
    async def test_empty_batch_rejected(self, dispatcher):
        with pytest.raises(ValueError):
            await BatchRunner(dispatcher).run_batch("d1", [])
