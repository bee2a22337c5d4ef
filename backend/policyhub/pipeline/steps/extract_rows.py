"""
ExtractRowsStep — decodes every row of the input file.

Decoding is all-or-nothing: a malformed file raises ParseError before a
single row reaches the database.
"""

from __future__ import annotations

import asyncio
import os

from policyhub.core.logging import get_logger
from policyhub.pipeline.context import PipelineContext, StepResult
from policyhub.pipeline.errors import ParseError
from policyhub.pipeline.step import PipelineStep
from policyhub.processing.extractors import get_extractor

logger = get_logger(__name__)


class ExtractRowsStep(PipelineStep):
    """Run the format-specific extractor over the whole file."""

    name = "extract_rows"
    description = "Extract rows from file"

    async def execute(self, ctx: PipelineContext) -> StepResult:
        started_at = self._now()

        if not os.path.exists(ctx.file_path):
            raise ParseError(
                f"Input file not found: {ctx.filename}",
                details={"filepath": ctx.file_path},
            )

        extractor = get_extractor(ctx.detected_format)
        # Extractors are blocking file readers
        ctx.raw_rows = await asyncio.to_thread(extractor.extract, ctx.file_path)
        ctx.report.total_records = len(ctx.raw_rows)

        logger.info(
            "Rows extracted",
            filename=ctx.filename,
            format=ctx.detected_format,
            rows=len(ctx.raw_rows),
        )
        return self._success(started_at, metadata={"rows": len(ctx.raw_rows)})
