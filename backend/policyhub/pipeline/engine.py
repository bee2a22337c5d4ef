"""
PipelineEngine — the orchestrator that runs steps sequentially.

Responsibilities:
    - Build the step sequence for an ingestion run
    - Execute each step with timing, logging, and error handling
    - Roll back the failing step and every completed step on failure
    - Return a complete PipelineResult
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from policyhub.core.constants import PipelineStatus, StepStatus
from policyhub.pipeline.context import PipelineContext, StepResult
from policyhub.pipeline.errors import PipelineError
from policyhub.pipeline.report import BatchFailure, IngestionReport
from policyhub.pipeline.step import PipelineStep


@dataclass
class PipelineResult:
    """Final outcome of a pipeline execution."""

    execution_id: str
    status: str                     # PipelineStatus value
    started_at: datetime | None = None
    completed_at: datetime | None = None
    total_duration_ms: int = 0
    steps_completed: int = 0
    total_steps: int = 0
    step_results: list[dict[str, Any]] = field(default_factory=list)
    report: IngestionReport | None = None
    error: str | None = None
    error_type: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == PipelineStatus.COMPLETED

    def outcome(self) -> IngestionReport | BatchFailure:
        """The report on success, otherwise the batch-level failure."""
        if self.succeeded and self.report is not None:
            return self.report
        return BatchFailure(
            error=self.error or "Ingestion failed",
            error_type=self.error_type or "PipelineError",
        )


class PipelineEngine:
    """
    Runs a sequence of PipelineStep objects against a PipelineContext.

    Usage::

        engine = PipelineEngine(session_factory)
        result = await engine.run("uploads/file-1.xlsx", "xlsx")
        outcome = result.outcome()
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.logger = structlog.get_logger("pipeline.engine")

    def build_steps(self) -> list[PipelineStep]:
        """The ingestion step sequence."""
        from policyhub.pipeline.resolver import EntityResolver
        from policyhub.pipeline.steps import (
            CleanupFileStep,
            DetectFormatStep,
            ExtractRowsStep,
            ProcessRowsStep,
        )

        if self.session_factory is None:
            raise PipelineError("PipelineEngine needs a session factory to process rows")

        return [
            DetectFormatStep(),
            ExtractRowsStep(),
            ProcessRowsStep(EntityResolver(self.session_factory)),
            CleanupFileStep(),
        ]

    async def run(self, file_path: str, file_type: str | None = None) -> PipelineResult:
        """
        Full ingestion run for one input file.

        Args:
            file_path: Local path of the uploaded file.  Consumed by the run.
            file_type: Declared type ("csv", "xlsx", "xls"); the path's
                       extension is used when omitted.
        """
        started_at = datetime.now(timezone.utc)
        ctx = PipelineContext(file_path=file_path, file_type=file_type)

        log = self.logger.bind(
            execution_id=ctx.execution_id,
            filename=ctx.filename,
            file_type=file_type,
        )
        log.info("Pipeline started")

        result = await self.run_steps(ctx, self.build_steps())
        result.started_at = started_at

        log.info(
            "Pipeline finished",
            status=result.status,
            steps_completed=result.steps_completed,
            total_steps=result.total_steps,
            duration_ms=result.total_duration_ms,
        )

        return result

    async def run_steps(
        self,
        ctx: PipelineContext,
        steps: list[PipelineStep],
    ) -> PipelineResult:
        """
        Execute an ordered list of steps against a context.

        Can be called directly with a pre-built step list for testing.
        """
        started_at = datetime.now(timezone.utc)

        log = self.logger.bind(
            execution_id=ctx.execution_id,
            total_steps=len(steps),
        )

        completed: list[PipelineStep] = []
        failure: StepResult | None = None

        for step_number, step in enumerate(steps, start=1):
            step_log = log.bind(
                step_name=step.name,
                step_index=step_number,
                step_description=step.description,
            )
            step_log.info(f"Step {step_number}/{len(steps)}: {step.description}")

            result = await self._execute(step, ctx, step_log)
            ctx.step_results.append(result)

            if result.status == StepStatus.COMPLETED:
                completed.append(step)
                step_log.info(
                    "Step completed",
                    duration_ms=result.duration_ms,
                    metadata=result.metadata,
                )
                continue

            step_log.error(
                "Step failed, pipeline stopping",
                error=result.error,
                error_type=result.error_type,
                duration_ms=result.duration_ms,
            )
            failure = result

            # Failing step first, then completed steps in reverse order
            for done in [step, *reversed(completed)]:
                try:
                    await done.rollback(ctx)
                except Exception as rollback_exc:
                    step_log.warning(
                        "Rollback failed",
                        rolled_back=done.name,
                        error=str(rollback_exc),
                    )
            step_log.info("Rollback completed")
            break

        # ── Finalise ──────────────────────────────────
        completed_at = datetime.now(timezone.utc)
        pipeline_status = PipelineStatus.FAILED if failure else PipelineStatus.COMPLETED

        return PipelineResult(
            execution_id=ctx.execution_id,
            status=pipeline_status,
            started_at=started_at,
            completed_at=completed_at,
            total_duration_ms=int((completed_at - started_at).total_seconds() * 1000),
            steps_completed=len(completed),
            total_steps=len(steps),
            step_results=[sr.to_dict() for sr in ctx.step_results],
            report=None if failure else ctx.report,
            error=failure.error if failure else None,
            error_type=failure.error_type if failure else None,
        )

    async def _execute(
        self,
        step: PipelineStep,
        ctx: PipelineContext,
        log: structlog.BoundLogger,
    ) -> StepResult:
        """Run one step, turning any exception into a failed StepResult."""
        started_at = datetime.now(timezone.utc)
        try:
            return await step.execute(ctx)

        except PipelineError as exc:
            exc.execution_id = exc.execution_id or ctx.execution_id
            exc.step_name = exc.step_name or step.name
            return step._failure(
                started_at,
                str(exc),
                error_type=type(exc).__name__,
                metadata=exc.details,
            )

        except Exception as exc:
            log.exception("Unexpected error in step", error=str(exc))
            return step._failure(
                started_at,
                f"Unexpected: {exc}",
                error_type=type(exc).__name__,
                metadata={"traceback": traceback.format_exc()},
            )
