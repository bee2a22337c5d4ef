"""TaskScheduler: validation, durable state, firing, cancellation and recovery."""

import asyncio
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy import event
from sqlalchemy.exc import OperationalError

from policyhub.core.constants import TaskStatus
from policyhub.db.models.base import as_utc
from policyhub.db.models.scheduled_task import ScheduledTask
from policyhub.scheduler import (
    ScheduleValidationError,
    TaskNotFoundError,
    TaskScheduler,
    generate_job_id,
    resolve_instant,
)


@pytest.fixture
async def scheduler(session_factory):
    scheduler = TaskScheduler(session_factory, timezone="Asia/Kolkata")
    yield scheduler
    scheduler.shutdown()


async def _insert(session_factory, job_id, scheduled_at, status=TaskStatus.PENDING):
    async with session_factory() as session:
        async with session.begin():
            session.add(ScheduledTask(
                job_id=job_id,
                message=f"message for {job_id}",
                scheduled_date=scheduled_at.strftime("%Y-%m-%d"),
                scheduled_time=scheduled_at.strftime("%H:%M"),
                timezone="UTC",
                scheduled_at=scheduled_at,
                status=status.value,
            ))


async def _task(scheduler, job_id) -> ScheduledTask:
    tasks = await scheduler.list_tasks()
    return next(t for t in tasks if t.job_id == job_id)


async def _wait_for_status(scheduler, job_id, status, timeout=5.0) -> ScheduledTask:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while True:
        task = await _task(scheduler, job_id)
        if task.status == status or loop.time() > deadline:
            return task
        await asyncio.sleep(0.05)


def _soon(seconds=1.0) -> datetime:
    return datetime.now(timezone.utc) + timedelta(seconds=seconds)


class _FailingCommitFactory:
    """Session factory whose sessions fail every commit."""

    def __init__(self, inner):
        self.inner = inner
        self.commits_attempted = 0

    def __call__(self):
        session = self.inner()
        event.listen(session.sync_session, "before_commit", self._fail)
        return session

    def _fail(self, session):
        self.commits_attempted += 1
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))


class TestResolveInstant:
    def test_wall_clock_in_zone(self):
        instant = resolve_instant("2099-01-01", "09:30", ZoneInfo("Asia/Kolkata"))
        assert instant == datetime(2099, 1, 1, 4, 0, tzinfo=timezone.utc)

    def test_dst_gap_is_rejected(self):
        with pytest.raises(ScheduleValidationError, match="daylight-saving"):
            resolve_instant("2030-03-10", "02:30", ZoneInfo("America/New_York"))

    def test_ambiguous_time_uses_first_occurrence(self):
        instant = resolve_instant("2030-11-03", "01:30", ZoneInfo("America/New_York"))
        assert instant == datetime(2030, 11, 3, 5, 30, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        "day, time",
        [
            ("2099-1-1", "09:30"),
            ("01/01/2099", "09:30"),
            ("2099-02-30", "09:30"),
            ("2099-01-01", "9:30"),
            ("2099-01-01", "24:00"),
            ("2099-01-01", "09:30:00"),
            ("", ""),
        ],
    )
    def test_malformed_input(self, day, time):
        with pytest.raises(ScheduleValidationError):
            resolve_instant(day, time, ZoneInfo("UTC"))

    def test_job_id_shape(self):
        job_id = generate_job_id()
        prefix, millis, suffix = job_id.split("_")
        assert prefix == "msg"
        assert millis.isdigit()
        assert len(suffix) == 9
        assert generate_job_id() != job_id


class TestScheduleTask:
    async def test_schedule_then_cancel(self, scheduler):
        result = await scheduler.schedule_task("reminder", "2099-01-01", "09:30")

        assert result.scheduled_at == datetime(2099, 1, 1, 4, 0, tzinfo=timezone.utc)
        assert result.job_id.startswith("msg_")

        task = await _task(scheduler, result.job_id)
        assert task.status == TaskStatus.PENDING
        assert task.timezone == "Asia/Kolkata"
        assert as_utc(task.scheduled_at) == result.scheduled_at

        stats = await scheduler.get_statistics()
        assert stats["pending"] == 1
        assert stats["active_jobs"] == 1

        cancelled = await scheduler.cancel_task(result.job_id)
        assert cancelled == {"job_id": result.job_id, "status": "cancelled"}

        stats = await scheduler.get_statistics()
        assert stats["cancelled"] == 1
        assert stats["active_jobs"] == 0
        assert (await _task(scheduler, result.job_id)).status == TaskStatus.CANCELLED

    async def test_past_instant_is_rejected_and_not_persisted(self, scheduler):
        with pytest.raises(ScheduleValidationError, match="future"):
            await scheduler.schedule_task("late", "2000-01-01", "09:00")
        assert await scheduler.list_tasks() == []

    async def test_empty_message_is_rejected(self, scheduler):
        with pytest.raises(ScheduleValidationError):
            await scheduler.schedule_task("   ", "2099-01-01", "09:30")

    async def test_unknown_timezone(self, session_factory):
        with pytest.raises(ScheduleValidationError):
            TaskScheduler(session_factory, timezone="Mars/Olympus_Mons")

    async def test_list_filters_by_status(self, scheduler):
        kept = await scheduler.schedule_task("keep", "2099-01-01", "10:00")
        dropped = await scheduler.schedule_task("drop", "2099-01-01", "09:00")
        await scheduler.cancel_task(dropped.job_id)

        pending = await scheduler.list_tasks(TaskStatus.PENDING.value)
        assert [t.job_id for t in pending] == [kept.job_id]
        # ordered by fire instant
        assert [t.job_id for t in await scheduler.list_tasks()] == [dropped.job_id, kept.job_id]

        with pytest.raises(ScheduleValidationError):
            await scheduler.list_tasks("bogus")

    async def test_storage_failure_leaves_nothing_registered(self, scheduler, session_factory):
        failing = _FailingCommitFactory(session_factory)
        broken = TaskScheduler(failing, timezone="Asia/Kolkata")

        with pytest.raises(OperationalError):
            await broken.schedule_task("lost", "2099-01-01", "09:30")

        assert failing.commits_attempted == 1
        assert broken._handles == {}
        assert broken._scheduler.get_jobs() == []
        assert await scheduler.list_tasks() == []
        broken.shutdown()

    async def test_running_follows_lifecycle(self, scheduler):
        assert scheduler.running is False
        scheduler.start()
        assert scheduler.running is True
        scheduler.shutdown()
        await asyncio.sleep(0)
        assert scheduler.running is False


class TestCancel:
    async def test_unknown_job(self, scheduler):
        with pytest.raises(TaskNotFoundError, match="not found or already processed"):
            await scheduler.cancel_task("msg_0_missing")

    @pytest.mark.parametrize("status", [TaskStatus.EXECUTED, TaskStatus.FAILED, TaskStatus.EXPIRED])
    async def test_terminal_task_is_left_untouched(self, scheduler, session_factory, status):
        await _insert(session_factory, "msg_1_done", _soon(-60), status=status)

        with pytest.raises(TaskNotFoundError):
            await scheduler.cancel_task("msg_1_done")

        assert (await _task(scheduler, "msg_1_done")).status == status

    async def test_pending_task_without_trigger_handle(self, scheduler, session_factory):
        await _insert(session_factory, "msg_6_unregistered", _soon(3600))

        cancelled = await scheduler.cancel_task("msg_6_unregistered")

        assert cancelled == {"job_id": "msg_6_unregistered", "status": "cancelled"}
        assert (await scheduler.get_statistics())["active_jobs"] == 0
        assert (await _task(scheduler, "msg_6_unregistered")).status == TaskStatus.CANCELLED

    async def test_second_cancel_fails(self, scheduler):
        result = await scheduler.schedule_task("once", "2099-06-01", "12:00")
        await scheduler.cancel_task(result.job_id)
        with pytest.raises(TaskNotFoundError):
            await scheduler.cancel_task(result.job_id)


class TestRestore:
    async def test_past_pending_expire_and_future_pending_register(self, scheduler, session_factory):
        await _insert(session_factory, "msg_1_past", _soon(-3600))
        await _insert(session_factory, "msg_2_future", _soon(3600))
        await _insert(session_factory, "msg_3_done", _soon(-7200), status=TaskStatus.EXECUTED)

        outcome = await scheduler.restore_on_startup()

        assert outcome == {"restored": 1, "expired": 1}
        assert (await _task(scheduler, "msg_1_past")).status == TaskStatus.EXPIRED
        assert (await _task(scheduler, "msg_2_future")).status == TaskStatus.PENDING
        assert (await _task(scheduler, "msg_3_done")).status == TaskStatus.EXECUTED
        assert (await scheduler.get_statistics())["active_jobs"] == 1

    async def test_restore_is_idempotent(self, scheduler, session_factory):
        await _insert(session_factory, "msg_2_future", _soon(3600))

        await scheduler.restore_on_startup()
        second = await scheduler.restore_on_startup()

        assert second == {"restored": 0, "expired": 0}
        assert (await scheduler.get_statistics())["active_jobs"] == 1

    async def test_sweep_skips_registered_tasks(self, scheduler, session_factory):
        await _insert(session_factory, "msg_4_future", _soon(3600))
        await scheduler.restore_on_startup()
        await _insert(session_factory, "msg_5_orphan", _soon(-5))

        assert await scheduler.expire_overdue() == 1
        assert (await _task(scheduler, "msg_5_orphan")).status == TaskStatus.EXPIRED
        assert (await _task(scheduler, "msg_4_future")).status == TaskStatus.PENDING


class TestFire:
    async def test_due_task_executes_once(self, session_factory):
        fired: list[str] = []
        scheduler = TaskScheduler(session_factory, timezone="UTC", on_fire=lambda t: fired.append(t.job_id))
        await _insert(session_factory, "msg_6_soon", _soon(0.5))
        try:
            await scheduler.restore_on_startup()
            scheduler.start()
            task = await _wait_for_status(scheduler, "msg_6_soon", TaskStatus.EXECUTED)
        finally:
            scheduler.shutdown()

        assert task.status == TaskStatus.EXECUTED
        assert task.executed_at is not None
        assert fired == ["msg_6_soon"]

    async def test_failing_callback_marks_task_failed(self, session_factory):
        async def explode(task):
            raise RuntimeError("delivery channel down")

        scheduler = TaskScheduler(session_factory, timezone="UTC", on_fire=explode)
        await _insert(session_factory, "msg_7_soon", _soon(0.5))
        try:
            await scheduler.restore_on_startup()
            scheduler.start()
            task = await _wait_for_status(scheduler, "msg_7_soon", TaskStatus.FAILED)
        finally:
            scheduler.shutdown()

        assert task.status == TaskStatus.FAILED
        assert task.error_message == "delivery channel down"
        assert task.executed_at is None

    async def test_cancelled_task_never_fires(self, session_factory):
        fired: list[str] = []
        scheduler = TaskScheduler(session_factory, timezone="UTC", on_fire=lambda t: fired.append(t.job_id))
        await _insert(session_factory, "msg_8_soon", _soon(0.5))
        try:
            await scheduler.restore_on_startup()
            scheduler.start()
            await scheduler.cancel_task("msg_8_soon")
            await asyncio.sleep(1.0)
        finally:
            scheduler.shutdown()

        assert fired == []
        assert (await _task(scheduler, "msg_8_soon")).status == TaskStatus.CANCELLED

    async def test_cancel_during_fire_waits_and_reports_processed(self, session_factory):
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow(task):
            started.set()
            await release.wait()

        scheduler = TaskScheduler(session_factory, timezone="UTC", on_fire=slow)
        await _insert(session_factory, "msg_9_soon", _soon(0.3))
        try:
            await scheduler.restore_on_startup()
            scheduler.start()
            await asyncio.wait_for(started.wait(), timeout=5)

            cancel = asyncio.create_task(scheduler.cancel_task("msg_9_soon"))
            await asyncio.sleep(0.1)
            assert not cancel.done()

            release.set()
            with pytest.raises(TaskNotFoundError):
                await cancel
        finally:
            scheduler.shutdown()

        assert (await _task(scheduler, "msg_9_soon")).status == TaskStatus.EXECUTED
