"""
Pipeline DB persistence — saves the ingestion run audit row.

Called by run_ingestion after the engine finishes.  Persistence problems
are logged and swallowed: the ingestion outcome has already been decided
and must still reach the caller.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from policyhub.core.logging import get_logger
from policyhub.db.models.ingestion_run import IngestionRun
from policyhub.pipeline.engine import PipelineResult

logger = get_logger(__name__)


async def persist_ingestion_run(
    session_factory: async_sessionmaker[AsyncSession],
    result: PipelineResult,
    *,
    filename: str,
    file_type: str | None,
) -> int | None:
    """Write one IngestionRun row.  Returns its id, or None on failure (non-fatal)."""
    report = result.report
    try:
        async with session_factory() as session:
            async with session.begin():
                run = IngestionRun(
                    execution_id=result.execution_id,
                    filename=filename,
                    file_type=(file_type or "unknown")[:10],
                    status=result.status,
                    total_records=report.total_records if report else 0,
                    successful_inserts=report.successful_inserts if report else 0,
                    error_count=len(report.errors) if report else 0,
                    summary=report.to_dict() if report else {},
                    error_message=result.error,
                    started_at=result.started_at,
                    completed_at=result.completed_at,
                    duration_ms=result.total_duration_ms,
                )
                session.add(run)
                await session.flush()
                run_id = run.id

        logger.info(
            "Ingestion run persisted to DB",
            run_id=run_id,
            execution_id=result.execution_id,
            status=result.status,
        )
        return run_id

    except Exception as exc:
        logger.error(
            "Failed to persist ingestion run to DB (non-fatal)",
            execution_id=result.execution_id,
            error=str(exc),
        )
        return None
