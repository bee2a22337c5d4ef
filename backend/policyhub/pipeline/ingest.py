"""
run_ingestion — worker entry point for one uploaded file.

Runs the pipeline, records the IngestionRun audit row and returns either an
IngestionReport or a BatchFailure.  When no session factory is supplied a
fresh engine is built for the call and disposed afterwards, so Celery
workers (one asyncio.run per task) never share a pool across event loops.
"""

from __future__ import annotations

import os

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from policyhub.core.logging import get_logger
from policyhub.db.session import make_engine, make_session_factory
from policyhub.pipeline.db_persist import persist_ingestion_run
from policyhub.pipeline.engine import PipelineEngine
from policyhub.pipeline.report import BatchFailure, IngestionReport

logger = get_logger(__name__)


async def run_ingestion(
    file_path: str,
    file_type: str | None = None,
    *,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    database_url: str | None = None,
) -> IngestionReport | BatchFailure:
    engine = None
    if session_factory is None:
        engine = make_engine(database_url)
        session_factory = make_session_factory(engine)

    try:
        result = await PipelineEngine(session_factory).run(file_path, file_type)
        await persist_ingestion_run(
            session_factory,
            result,
            filename=os.path.basename(file_path),
            file_type=file_type,
        )
    finally:
        if engine is not None:
            await engine.dispose()

    outcome = result.outcome()
    if isinstance(outcome, BatchFailure):
        logger.error(
            "Ingestion failed",
            execution_id=result.execution_id,
            error=outcome.error,
            error_type=outcome.error_type,
        )
    else:
        logger.info(
            "Ingestion completed",
            execution_id=result.execution_id,
            total_records=outcome.total_records,
            successful_inserts=outcome.successful_inserts,
            row_errors=len(outcome.errors),
        )
    return outcome
