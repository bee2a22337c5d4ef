"""
PipelineStep — unit of work in an ingestion run.

A step reads what earlier steps left on the PipelineContext, does one job
and reports back with a StepResult.  Timing and failure bookkeeping live
in the engine; a step raises a PipelineError subclass when it cannot
finish.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

from policyhub.core.constants import StepStatus
from policyhub.pipeline.context import PipelineContext, StepResult


class PipelineStep(ABC):
    """
    Subclasses set `name` and `description` and implement execute().

    rollback() runs when this step or any later one fails, in reverse
    completion order.
    """

    name: str = "unnamed_step"
    description: str = "No description"

    @abstractmethod
    async def execute(self, ctx: PipelineContext) -> StepResult:
        ...

    async def rollback(self, ctx: PipelineContext) -> None:
        pass

    # ─── Result builders ───────────────────────────────

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _result(
        self,
        status: StepStatus,
        started_at: datetime,
        **fields: Any,
    ) -> StepResult:
        finished = self._now()
        elapsed_ms = int((finished - started_at).total_seconds() * 1000)
        return StepResult(
            step_name=self.name,
            status=status,
            started_at=started_at,
            completed_at=finished,
            duration_ms=elapsed_ms,
            **fields,
        )

    def _success(
        self,
        started_at: datetime,
        metadata: dict[str, Any] | None = None,
    ) -> StepResult:
        return self._result(StepStatus.COMPLETED, started_at, metadata=metadata or {})

    def _failure(
        self,
        started_at: datetime,
        error: str,
        error_type: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> StepResult:
        return self._result(
            StepStatus.FAILED,
            started_at,
            error=error,
            error_type=error_type,
            metadata=metadata or {},
        )
