"""
ScheduledTask — durable record behind every one-shot scheduler trigger.

The in-memory trigger is rebuilt from this table on startup, so the row
is the source of truth: status moves from `pending` to exactly one of
executed / failed / cancelled / expired and never changes again.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from policyhub.core.constants import TaskStatus
from policyhub.db.models.base import Base, utcnow


class ScheduledTask(Base):
    __tablename__ = "scheduled_tasks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    job_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)

    message: Mapped[str] = mapped_column(Text, nullable=False)

    # ── What the caller asked for ────────────
    scheduled_date: Mapped[str] = mapped_column(String(10), nullable=False)   # YYYY-MM-DD
    scheduled_time: Mapped[str] = mapped_column(String(5), nullable=False)    # HH:MM
    timezone: Mapped[str] = mapped_column(String(64), nullable=False)

    # ── Absolute fire instant (UTC) ──────────
    scheduled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TaskStatus.PENDING.value, index=True
    )
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    executed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return f"<ScheduledTask {self.job_id} status={self.status} at={self.scheduled_at}>"
