"""
Celery tasks — bulk file ingestion.

Wires run_ingestion into the Celery task system.  Each task produces
exactly one result message:

    {"success": True, "data": <IngestionReport dict>}
    {"success": False, "error": "<message>", "error_type": "<class name>"}
"""

import asyncio

import structlog

from policyhub.pipeline.ingest import run_ingestion
from policyhub.pipeline.report import BatchFailure
from policyhub.tasks import celery_app

logger = structlog.get_logger("tasks.ingestion")


@celery_app.task(bind=True, name="policyhub.tasks.ingestion_tasks.ingest_file")
def ingest_file(self, file_path: str, file_type: str | None = None) -> dict:
    """Run the ingestion pipeline for one uploaded file."""
    task_log = logger.bind(task_id=self.request.id, file_path=file_path, file_type=file_type)
    task_log.info("Ingestion task started")

    try:
        # Run the async pipeline in sync Celery context (fresh engine per call)
        outcome = asyncio.run(run_ingestion(file_path, file_type))
    except Exception as exc:
        task_log.exception("Ingestion task crashed", error=str(exc))
        return {"success": False, "error": str(exc), "error_type": type(exc).__name__}

    if isinstance(outcome, BatchFailure):
        task_log.info("Ingestion task finished", success=False, error=outcome.error)
        return {"success": False, **outcome.to_dict()}

    task_log.info(
        "Ingestion task finished",
        success=True,
        total_records=outcome.total_records,
        successful_inserts=outcome.successful_inserts,
    )
    return {"success": True, "data": outcome.to_dict()}
