"""
DetectFormatStep — resolves the input's tabular format.

The run owns the input file from this step onward, so rolling this step
back (which the engine does on any failure) deletes the file.
"""

from __future__ import annotations

from policyhub.core.logging import get_logger
from policyhub.pipeline.context import PipelineContext, StepResult
from policyhub.pipeline.step import PipelineStep
from policyhub.processing.files import remove_file
from policyhub.processing.format_detector import detect_format

logger = get_logger(__name__)


class DetectFormatStep(PipelineStep):
    """Map the declared type / extension to a FileFormat."""

    name = "detect_format"
    description = "Detect file format"

    async def execute(self, ctx: PipelineContext) -> StepResult:
        started_at = self._now()

        # UnsupportedFileTypeError propagates to the engine as-is
        ctx.detected_format = detect_format(ctx.file_type, ctx.file_path)

        logger.info(
            "Format detected",
            filename=ctx.filename,
            declared_type=ctx.file_type,
            format=ctx.detected_format,
        )
        return self._success(started_at, metadata={"format": ctx.detected_format})

    async def rollback(self, ctx: PipelineContext) -> None:
        ctx.file_removed = remove_file(ctx.file_path) or ctx.file_removed
