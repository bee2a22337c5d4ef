"""
ScheduledTask repository — durable state behind the task scheduler.

Status transitions are conditional updates (`WHERE status = 'pending'`)
so a terminal record can never be overwritten, whichever process or
flow gets there first.
"""

from __future__ import annotations

from collections.abc import Collection
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from policyhub.core.constants import TaskStatus
from policyhub.db.models.scheduled_task import ScheduledTask
from policyhub.repositories.base import insert


async def create_task(db: AsyncSession, task: ScheduledTask) -> ScheduledTask:
    """Insert a new scheduled task."""
    return await insert(db, task)


async def get_task_by_job_id(db: AsyncSession, job_id: str) -> ScheduledTask | None:
    stmt = select(ScheduledTask).where(ScheduledTask.job_id == job_id)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def list_tasks(
    db: AsyncSession,
    *,
    status: str | None = None,
) -> list[ScheduledTask]:
    """All tasks ordered by fire instant, optionally filtered by status."""
    stmt = select(ScheduledTask).order_by(ScheduledTask.scheduled_at, ScheduledTask.id)
    if status is not None:
        stmt = stmt.where(ScheduledTask.status == status)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_pending_after(db: AsyncSession, instant: datetime) -> list[ScheduledTask]:
    """Pending tasks whose fire instant is still ahead of `instant`."""
    stmt = (
        select(ScheduledTask)
        .where(
            ScheduledTask.status == TaskStatus.PENDING.value,
            ScheduledTask.scheduled_at > instant,
        )
        .order_by(ScheduledTask.scheduled_at)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def transition_pending(
    db: AsyncSession,
    job_id: str,
    status: TaskStatus,
    *,
    executed_at: datetime | None = None,
    error_message: str | None = None,
) -> bool:
    """Move a pending task to `status`.  Returns False if it was not pending."""
    values: dict[str, object] = {"status": status.value}
    if executed_at is not None:
        values["executed_at"] = executed_at
    if error_message is not None:
        values["error_message"] = error_message

    stmt = (
        update(ScheduledTask)
        .where(
            ScheduledTask.job_id == job_id,
            ScheduledTask.status == TaskStatus.PENDING.value,
        )
        .values(**values)
    )
    result = await db.execute(stmt)
    await db.flush()
    return result.rowcount == 1


async def expire_overdue(
    db: AsyncSession,
    instant: datetime,
    *,
    exclude_job_ids: Collection[str] = (),
) -> int:
    """Mark pending tasks due at or before `instant` as expired."""
    stmt = update(ScheduledTask).where(
        ScheduledTask.status == TaskStatus.PENDING.value,
        ScheduledTask.scheduled_at <= instant,
    )
    if exclude_job_ids:
        stmt = stmt.where(ScheduledTask.job_id.not_in(list(exclude_job_ids)))
    result = await db.execute(
        stmt.values(status=TaskStatus.EXPIRED.value).execution_options(
            synchronize_session=False
        )
    )
    await db.flush()
    return result.rowcount or 0


async def count_by_status(db: AsyncSession) -> dict[str, int]:
    """Row counts keyed by status; every status is present."""
    stmt = select(ScheduledTask.status, func.count()).group_by(ScheduledTask.status)
    result = await db.execute(stmt)
    counts = {status.value: 0 for status in TaskStatus}
    for status, count in result.all():
        counts[status] = count
    return counts
