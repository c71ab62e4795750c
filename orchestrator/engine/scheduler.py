"""Recurring scheduler: one interval timer per registered job.

Jobs live in process memory. When a storage port is given, job specs
(never timer handles) are persisted so ``restore()`` can re-register them
after a restart.

All mutations (register / set_enabled / unregister) run without awaiting,
so a tick on the same event loop always sees a consistent job.
"""

import asyncio
import sys
import uuid
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Dict, List, Optional, Set

from orchestrator.domain.errors import InvalidSchedule, JobNotFound
from orchestrator.domain.models import KIND_SCHEDULED, DispatchResult
from orchestrator.domain.schedule import ScheduledJob, ScheduledJobSpec, parse_cron_interval
from orchestrator.engine.dispatcher import ActionDispatcher
from orchestrator.ports.outbound import DevicePort, StoragePort

_STORAGE_KEY = "schedules"


def _log(msg: str):
    print(msg, file=sys.stderr)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecurringScheduler:
    """Owns the job registry and every job's timer task.

    A timer fires every ``interval`` like ``setInterval``: each fire spawns
    a tick task, so a slow dispatch never delays the next fire. Ticks of
    different jobs are not serialized.
    """

    def __init__(
        self,
        dispatcher: ActionDispatcher,
        devices: DevicePort,
        storage: Optional[StoragePort] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.dispatcher = dispatcher
        self.devices = devices
        self._storage = storage
        self._sleep = sleep
        self._clock = clock
        self._jobs: Dict[str, ScheduledJob] = {}
        self._tick_tasks: Set[asyncio.Task] = set()

    # ── Registry ─────────────────────────────────────────────

    def register(self, spec: ScheduledJobSpec) -> ScheduledJob:
        """Validate, create and start a job. Must run inside an event loop.

        Raises InvalidSchedule for anything but ``*/N * * * *``.
        """
        interval_ms = parse_cron_interval(spec.cron)
        if not spec.name or not spec.name.strip():
            raise ValueError("Scheduled job name must not be empty")
        if not spec.device_id:
            raise ValueError("Scheduled job device_id must not be empty")

        job_id = spec.id or f"schedule-{uuid.uuid4().hex[:8]}"
        if job_id in self._jobs:
            raise ValueError(f"Scheduled job {job_id!r} already exists")

        now = self._clock()
        job = ScheduledJob(
            id=job_id,
            name=spec.name.strip(),
            cron=spec.cron.strip(),
            interval_ms=interval_ms,
            action=spec.action,
            device_id=spec.device_id,
            enabled=spec.enabled,
            created_at=now.isoformat(),
            next_run=(now + timedelta(milliseconds=interval_ms)).isoformat(),
        )
        job.timer = asyncio.create_task(self._timer_loop(job_id, job.interval_seconds))
        self._jobs[job_id] = job
        self._persist()
        _log(f"[Scheduler] registered {job_id} ({job.name}) every {interval_ms // 60000}m")
        return job

    def set_enabled(self, job_id: str, enabled: bool) -> ScheduledJob:
        """Toggle dispatching. The timer keeps firing either way."""
        job = self._jobs.get(job_id)
        if job is None:
            raise JobNotFound(f"Scheduled job not found: {job_id}")
        job.enabled = bool(enabled)
        self._persist()
        return job

    def unregister(self, job_id: str) -> ScheduledJob:
        """Cancel the job's timer, then drop the job."""
        job = self._jobs.get(job_id)
        if job is None:
            raise JobNotFound(f"Scheduled job not found: {job_id}")
        if job.timer is not None:
            job.timer.cancel()
            job.timer = None
        del self._jobs[job_id]
        self._persist()
        _log(f"[Scheduler] unregistered {job_id}")
        return job

    def get(self, job_id: str) -> Optional[ScheduledJob]:
        return self._jobs.get(job_id)

    def list(self) -> List[ScheduledJob]:
        return list(self._jobs.values())

    def restore(self) -> int:
        """Re-register persisted job specs. Returns how many were started."""
        if self._storage is None:
            return 0
        restored = 0
        for item in self._storage.load(_STORAGE_KEY):
            if not isinstance(item, dict) or item.get("id") in self._jobs:
                continue
            try:
                job = self.register(ScheduledJobSpec.from_dict(item))
            except (InvalidSchedule, ValueError) as e:
                _log(f"[Scheduler] skipping persisted job {item.get('id')!r}: {e}")
                continue
            job.last_run = str(item.get("last_run", ""))
            restored += 1
        return restored

    async def shutdown(self):
        """Cancel every timer and in-flight tick. Persisted specs are kept."""
        pending = []
        for job in self._jobs.values():
            if job.timer is not None:
                job.timer.cancel()
                pending.append(job.timer)
                job.timer = None
        for task in list(self._tick_tasks):
            task.cancel()
            pending.append(task)
        self._jobs.clear()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    # ── Timer ────────────────────────────────────────────────

    async def _timer_loop(self, job_id: str, interval_seconds: float):
        while True:
            await self._sleep(interval_seconds)
            if job_id not in self._jobs:
                return
            task = asyncio.create_task(self._tick(job_id))
            self._tick_tasks.add(task)
            task.add_done_callback(self._tick_tasks.discard)

    async def _tick(self, job_id: str) -> Optional[DispatchResult]:
        """One timer fire. Never raises; the timer must survive any failure."""
        job = self._jobs.get(job_id)
        if job is None:
            return None
        try:
            now = self._clock()
            job.next_run = (now + timedelta(milliseconds=job.interval_ms)).isoformat()

            if not job.enabled:
                return None

            device = self.devices.get(job.device_id)
            if device is None or not device.is_online:
                return None

            result = await self.dispatcher.dispatch(
                job.device_id,
                job.action,
                kind=KIND_SCHEDULED,
                name=f"[scheduled] {job.name}",
            )
            job.last_run = self._clock().isoformat()
            if job_id in self._jobs:
                self._persist()
            return result
        except Exception as e:
            _log(f"[Scheduler] job {job_id} tick failed: {e}")
            return None

    def _persist(self):
        if self._storage is None:
            return
        try:
            self._storage.save(_STORAGE_KEY, [j.to_dict() for j in self._jobs.values()])
        except Exception as e:
            _log(f"[Scheduler] save failed: {e}")
