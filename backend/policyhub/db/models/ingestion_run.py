"""
IngestionRun — audit record for one bulk file ingestion.

One row per run.  Tracks the input file, status, timing and the final
report counters so past imports can be inspected without the worker's
result backend.
"""

from __future__ import annotations

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text

from policyhub.db.models.base import Base, utcnow


class IngestionRun(Base):
    """One row per ingestion run."""

    __tablename__ = "ingestion_runs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    execution_id = Column(String(36), unique=True, nullable=False, index=True)

    # ── Input ────────────────────────────────
    filename = Column(String(255), nullable=False)
    file_type = Column(String(10), nullable=False)

    # ── Status ───────────────────────────────
    status = Column(String(50), nullable=False, default="PENDING", index=True)

    # ── Report counters ──────────────────────
    total_records = Column(Integer, default=0)
    successful_inserts = Column(Integer, default=0)
    error_count = Column(Integer, default=0)
    # Deduplicated per-kind counts plus the full row error list
    summary = Column(JSON, default=dict)

    # ── Error ─────────────────────────────────
    error_message = Column(Text, nullable=True)

    # ── Timing (UTC) ─────────────────────────
    started_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    duration_ms = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<IngestionRun {self.execution_id} file={self.filename} status={self.status}>"
