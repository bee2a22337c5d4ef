"""
Upload dispatch — validates an uploaded file and hands it to a worker.

The caller's coroutine suspends until the worker's single result message
arrives; the pipeline itself never runs on the request's event loop.
"""

from __future__ import annotations

import asyncio
import os
from typing import Any

from policyhub.core.config import settings
from policyhub.core.logging import get_logger
from policyhub.pipeline.errors import UploadValidationError
from policyhub.processing.files import remove_file

logger = get_logger(__name__)


def validate_upload(
    file_path: str,
    *,
    max_size_mb: int | None = None,
    allowed_extensions: list[str] | None = None,
) -> None:
    """Raise UploadValidationError unless the file exists, fits the size limit and has an allowed extension."""
    max_size_mb = max_size_mb or settings.MAX_UPLOAD_SIZE_MB
    allowed = [ext.lower() for ext in (allowed_extensions or settings.ALLOWED_UPLOAD_EXTENSIONS)]

    if not os.path.isfile(file_path):
        raise UploadValidationError(
            "File validation failed: file not found",
            details={"filepath": file_path},
        )

    size = os.path.getsize(file_path)
    if size > max_size_mb * 1024 * 1024:
        raise UploadValidationError(
            f"File validation failed: file size exceeds {max_size_mb}MB limit",
            details={"filepath": file_path, "size": size},
        )

    ext = os.path.splitext(file_path)[1].lower()
    if ext not in allowed:
        raise UploadValidationError(
            f"File validation failed: file type {ext or '(none)'} not allowed. "
            f"Allowed types: {', '.join(allowed)}",
            details={"filepath": file_path, "extension": ext},
        )


async def process_upload(
    file_path: str,
    file_type: str | None = None,
    *,
    timeout: float | None = None,
) -> dict[str, Any]:
    """
    Validate, dispatch to the ingestion worker and await its result.

    Returns the worker's message: {"success": True, "data": report} or
    {"success": False, "error": ...}.  A rejected file is deleted and
    UploadValidationError is raised.
    """
    from policyhub.tasks.ingestion_tasks import ingest_file

    try:
        validate_upload(file_path)
    except UploadValidationError as exc:
        logger.warning("Upload rejected", filepath=file_path, error=str(exc))
        remove_file(file_path)
        raise

    timeout = timeout or settings.INGEST_RESULT_TIMEOUT_SECONDS
    async_result = ingest_file.delay(file_path, file_type)
    logger.info("Ingestion dispatched", task_id=async_result.id, filepath=file_path)

    # AsyncResult.get blocks, so wait in a worker thread
    return await asyncio.to_thread(async_result.get, timeout=timeout)
