"""
TaskScheduler — durable one-shot message scheduling.

Each task is a `scheduled_tasks` row plus, while it is pending in this
process, an APScheduler job with a DateTrigger.  The row is the source of
truth; the in-memory registry is rebuilt by restore_on_startup().

Registry rules:
    - `_handles` (job_id → Job) and `_in_flight` (job_id → Event) are only
      mutated while holding `_lock`.
    - A fire pops its handle under the lock.  No handle means the task was
      cancelled first, and nothing runs.
    - The callback runs outside the lock; cancellation of an in-flight task
      waits for the fire to finish and then sees a terminal status.
"""

from __future__ import annotations

import asyncio
import inspect
import re
import time as time_mod
from dataclasses import dataclass
from datetime import date, datetime, time as dt_time, timezone as dt_timezone
from typing import Any, Awaitable, Callable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog
from apscheduler.job import Job
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from policyhub.core.config import settings
from policyhub.core.constants import TaskStatus
from policyhub.db.models.base import as_utc
from policyhub.db.models.scheduled_task import ScheduledTask
from policyhub.processing.parsers import random_base36
from policyhub.repositories import scheduled_tasks as tasks_repo
from policyhub.scheduler.errors import ScheduleValidationError, TaskNotFoundError

logger = structlog.get_logger("scheduler")

OnFire = Callable[[ScheduledTask], Awaitable[Any] | Any]

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

SWEEP_JOB_ID = "scheduled-task-expiry-sweep"


@dataclass
class ScheduleResult:
    job_id: str
    scheduled_at: datetime
    task_id: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "job_id": self.job_id,
            "scheduled_at": self.scheduled_at.isoformat(),
            "task_id": self.task_id,
        }


# ═══════════════════════════════════════════════════════════
#  Helpers
# ═══════════════════════════════════════════════════════════

def generate_job_id() -> str:
    """`msg_{epoch_ms}_{9 base36 chars}`."""
    return f"msg_{int(time_mod.time() * 1000)}_{random_base36(9)}"


def resolve_instant(day: str, time: str, tz: ZoneInfo) -> datetime:
    """
    Interpret a wall-clock date/time pair in `tz` and return the UTC instant.

    Times inside a DST gap do not exist and are rejected.  Ambiguous times
    (DST fall-back) resolve to the first occurrence.
    """
    if not isinstance(day, str) or not DATE_RE.match(day.strip()):
        raise ScheduleValidationError(f"Invalid date {day!r}, expected YYYY-MM-DD")
    if not isinstance(time, str) or not TIME_RE.match(time.strip()):
        raise ScheduleValidationError(f"Invalid time {time!r}, expected HH:MM (24-hour)")

    try:
        local_date = date.fromisoformat(day.strip())
    except ValueError as exc:
        raise ScheduleValidationError(f"Invalid date {day!r}: {exc}") from exc
    hour, minute = (int(part) for part in time.strip().split(":"))

    local = datetime.combine(local_date, dt_time(hour, minute), tzinfo=tz).replace(fold=0)
    instant = local.astimezone(dt_timezone.utc)

    # Non-existent local times do not survive the round trip
    if instant.astimezone(tz).replace(tzinfo=None) != local.replace(tzinfo=None):
        raise ScheduleValidationError(
            f"{day} {time} does not exist in {tz.key} (daylight-saving gap)"
        )
    return instant


async def process_message(task: ScheduledTask) -> None:
    """Default side effect of a fired task: log the message."""
    logger.info(
        "Executing scheduled message",
        job_id=task.job_id,
        message=task.message,
        scheduled_at=as_utc(task.scheduled_at).isoformat(),
    )


# ═══════════════════════════════════════════════════════════
#  TaskScheduler
# ═══════════════════════════════════════════════════════════

class TaskScheduler:
    """
    Durable one-shot scheduler.

    Usage::

        scheduler = TaskScheduler(async_session, timezone="Asia/Kolkata")
        scheduler.start()
        await scheduler.restore_on_startup()
        result = await scheduler.schedule_task("reminder", "2099-01-01", "09:30")
        ...
        scheduler.shutdown()
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        timezone: str | None = None,
        on_fire: OnFire | None = None,
        sweep_interval_seconds: int = 0,
    ) -> None:
        tz_name = timezone or settings.SCHEDULER_TIMEZONE
        try:
            self.timezone = ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ScheduleValidationError(f"Unknown timezone {tz_name!r}") from exc

        self.session_factory = session_factory
        self.on_fire: OnFire = on_fire or process_message
        self.sweep_interval_seconds = sweep_interval_seconds

        self._scheduler = AsyncIOScheduler(timezone=self.timezone)
        self._lock = asyncio.Lock()
        self._handles: dict[str, Job] = {}
        self._in_flight: dict[str, asyncio.Event] = {}

    # ─── Lifecycle ─────────────────────────────────────

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self) -> None:
        """Start the trigger loop.  Must be called from a running event loop."""
        if self._scheduler.running:
            return
        if self.sweep_interval_seconds > 0:
            self._scheduler.add_job(
                self.expire_overdue,
                IntervalTrigger(seconds=self.sweep_interval_seconds),
                id=SWEEP_JOB_ID,
                replace_existing=True,
                coalesce=True,
                max_instances=1,
            )
        self._scheduler.start()
        logger.info(
            "Task scheduler started",
            timezone=self.timezone.key,
            sweep_interval_seconds=self.sweep_interval_seconds,
        )

    def shutdown(self) -> None:
        """Stop firing.  Pending rows stay pending and are restored on next start."""
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._handles.clear()
        logger.info("Task scheduler stopped")

    # ─── Registry (callers hold _lock) ─────────────────

    def _register(self, job_id: str, run_at: datetime) -> None:
        job = self._scheduler.add_job(
            self._fire,
            DateTrigger(run_date=run_at),
            args=[job_id],
            id=job_id,
            replace_existing=True,
            misfire_grace_time=None,
        )
        self._handles[job_id] = job

    def _release(self, job_id: str) -> None:
        if self._handles.pop(job_id, None) is None:
            return
        try:
            self._scheduler.remove_job(job_id)
        except JobLookupError:
            # Already dequeued by APScheduler; the fire will find no handle
            pass

    # ─── Create ────────────────────────────────────────

    async def schedule_task(self, message: str, day: str, time: str) -> ScheduleResult:
        """
        Persist a pending task and register its one-shot trigger.

        Raises ScheduleValidationError for an empty message, a malformed
        date/time, a DST-gap time or an instant that is not in the future.
        """
        if not isinstance(message, str) or not message.strip():
            raise ScheduleValidationError("Message must be a non-empty string")

        scheduled_at = resolve_instant(day, time, self.timezone)
        now = datetime.now(dt_timezone.utc)
        if scheduled_at <= now:
            raise ScheduleValidationError(
                f"Scheduled time {day} {time} ({self.timezone.key}) must be in the future"
            )

        job_id = generate_job_id()
        log = logger.bind(job_id=job_id)

        async with self._lock:
            async with self.session_factory() as session:
                async with session.begin():
                    task = await tasks_repo.create_task(session, ScheduledTask(
                        job_id=job_id,
                        message=message,
                        scheduled_date=day.strip(),
                        scheduled_time=time.strip(),
                        timezone=self.timezone.key,
                        scheduled_at=scheduled_at,
                        status=TaskStatus.PENDING.value,
                    ))

            try:
                self._register(job_id, scheduled_at)
            except Exception as exc:
                log.error("Trigger registration failed", error=str(exc))
                async with self.session_factory() as session:
                    async with session.begin():
                        await tasks_repo.transition_pending(
                            session,
                            job_id,
                            TaskStatus.FAILED,
                            error_message=f"Trigger registration failed: {exc}",
                        )
                raise

        log.info("Task scheduled", scheduled_at=scheduled_at.isoformat(), timezone=self.timezone.key)
        return ScheduleResult(job_id=job_id, scheduled_at=scheduled_at, task_id=task.id)

    # ─── Fire ──────────────────────────────────────────

    async def _fire(self, job_id: str) -> None:
        """Trigger target.  Never raises."""
        async with self._lock:
            if self._handles.pop(job_id, None) is None:
                logger.debug("Trigger fired for released task, skipping", job_id=job_id)
                return
            done = asyncio.Event()
            self._in_flight[job_id] = done

        try:
            await self._execute(job_id)
        except Exception as exc:
            logger.exception("Scheduled task bookkeeping failed", job_id=job_id, error=str(exc))
        finally:
            async with self._lock:
                self._in_flight.pop(job_id, None)
            done.set()

    async def _execute(self, job_id: str) -> None:
        log = logger.bind(job_id=job_id)

        async with self.session_factory() as session:
            task = await tasks_repo.get_task_by_job_id(session, job_id)
        if task is None or task.status != TaskStatus.PENDING.value:
            log.warning("Fired task is no longer pending", status=task.status if task else None)
            return

        error_message = None
        try:
            outcome = self.on_fire(task)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as exc:
            error_message = str(exc) or type(exc).__name__
            log.exception("Scheduled task callback failed", error=error_message)

        async with self.session_factory() as session:
            async with session.begin():
                if error_message is None:
                    updated = await tasks_repo.transition_pending(
                        session,
                        job_id,
                        TaskStatus.EXECUTED,
                        executed_at=datetime.now(dt_timezone.utc),
                    )
                else:
                    updated = await tasks_repo.transition_pending(
                        session,
                        job_id,
                        TaskStatus.FAILED,
                        error_message=error_message,
                    )

        log.info(
            "Scheduled task fired",
            status=TaskStatus.EXECUTED if error_message is None else TaskStatus.FAILED,
            recorded=updated,
        )

    # ─── Recovery ──────────────────────────────────────

    async def restore_on_startup(self) -> dict[str, int]:
        """
        Re-register future pending tasks and expire the ones whose instant passed.

        Missed instants are never replayed.
        """
        now = datetime.now(dt_timezone.utc)
        restored = 0

        async with self._lock:
            async with self.session_factory() as session:
                async with session.begin():
                    upcoming = await tasks_repo.list_pending_after(session, now)
                    for task in upcoming:
                        if task.job_id in self._handles or task.job_id in self._in_flight:
                            continue
                        self._register(task.job_id, as_utc(task.scheduled_at))
                        restored += 1

                    expired = await tasks_repo.expire_overdue(
                        session,
                        now,
                        exclude_job_ids=set(self._handles) | set(self._in_flight),
                    )

        logger.info("Scheduled tasks restored", restored=restored, expired=expired)
        return {"restored": restored, "expired": expired}

    async def expire_overdue(self) -> int:
        """Expire overdue pending tasks that this process is not about to fire."""
        now = datetime.now(dt_timezone.utc)
        async with self._lock:
            async with self.session_factory() as session:
                async with session.begin():
                    expired = await tasks_repo.expire_overdue(
                        session,
                        now,
                        exclude_job_ids=set(self._handles) | set(self._in_flight),
                    )
        if expired:
            logger.info("Overdue scheduled tasks expired", expired=expired)
        return expired

    # ─── Cancel ────────────────────────────────────────

    async def cancel_task(self, job_id: str) -> dict[str, str]:
        """
        Cancel a pending task.

        Raises TaskNotFoundError when the job id is unknown or the task is
        already terminal; the record is left untouched in that case.
        """
        while True:
            async with self._lock:
                in_flight = self._in_flight.get(job_id)
                if in_flight is None:
                    async with self.session_factory() as session:
                        async with session.begin():
                            cancelled = await tasks_repo.transition_pending(
                                session, job_id, TaskStatus.CANCELLED,
                            )
                    if not cancelled:
                        raise TaskNotFoundError(
                            "Message not found or already processed", job_id=job_id,
                        )
                    self._release(job_id)
                    break
            # Let the fire record its outcome, then re-check
            await in_flight.wait()

        logger.info("Task cancelled", job_id=job_id)
        return {"job_id": job_id, "status": TaskStatus.CANCELLED.value}

    # ─── Queries ───────────────────────────────────────

    async def list_tasks(self, status: str | None = None) -> list[ScheduledTask]:
        """All tasks ordered by fire instant, optionally filtered by status."""
        if status is not None and status not in {s.value for s in TaskStatus}:
            raise ScheduleValidationError(f"Unknown task status {status!r}")
        async with self.session_factory() as session:
            return await tasks_repo.list_tasks(session, status=status)

    async def get_statistics(self) -> dict[str, int]:
        async with self.session_factory() as session:
            counts = await tasks_repo.count_by_status(session)
        return {
            "total": sum(counts.values()),
            **counts,
            "active_jobs": len(self._handles),
        }
