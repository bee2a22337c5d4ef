"""CleanupFileStep — deletes the consumed input file after a successful run."""

from __future__ import annotations

from policyhub.core.logging import get_logger
from policyhub.pipeline.context import PipelineContext, StepResult
from policyhub.pipeline.step import PipelineStep
from policyhub.processing.files import remove_file

logger = get_logger(__name__)


class CleanupFileStep(PipelineStep):
    name = "cleanup_file"
    description = "Remove processed input file"

    async def execute(self, ctx: PipelineContext) -> StepResult:
        started_at = self._now()
        ctx.file_removed = remove_file(ctx.file_path)
        if not ctx.file_removed:
            logger.warning("Input file was not removed", filepath=ctx.file_path)
        return self._success(started_at, metadata={"file_removed": ctx.file_removed})
