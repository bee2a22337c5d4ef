"""
PipelineContext — mutable state object carried through every step.

This is the single source of truth for an ingestion run.  Each step
reads from and writes to the context.  The engine serialises the
final context to the audit row for traceability.
"""

from __future__ import annotations

import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from policyhub.pipeline.report import IngestionReport


# ═══════════════════════════════════════════════════════════
#  StepResult
# ═══════════════════════════════════════════════════════════

@dataclass
class StepResult:
    """Outcome of a single pipeline step execution."""

    step_name: str
    status: str                     # StepStatus value
    started_at: datetime | None = None
    completed_at: datetime | None = None
    duration_ms: int = 0
    error: str | None = None
    error_type: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialise for JSON storage."""
        return {
            "step_name": self.step_name,
            "status": self.status,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_ms": self.duration_ms,
            "error": self.error,
            "error_type": self.error_type,
            "metadata": self.metadata,
        }


# ═══════════════════════════════════════════════════════════
#  PipelineContext
# ═══════════════════════════════════════════════════════════

@dataclass
class PipelineContext:
    """
    Carries all state between pipeline steps.

    Populated progressively — detection fills in the format,
    extraction fills in raw rows, row processing fills in the report.
    """

    # ─── Identity (set at init) ────────────────────────
    file_path: str
    file_type: str | None = None
    execution_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    # ─── Detection / extraction ───────────────────────
    detected_format: str | None = None
    raw_rows: list[dict[str, Any]] = field(default_factory=list)

    # ─── Row processing ───────────────────────────────
    report: IngestionReport = field(default_factory=IngestionReport)
    file_removed: bool = False

    # ─── Execution tracking ────────────────────────────
    step_results: list[StepResult] = field(default_factory=list)

    @property
    def filename(self) -> str:
        return os.path.basename(self.file_path)
