"""Ingestion pipeline steps, in execution order."""

from policyhub.pipeline.steps.detect_format import DetectFormatStep
from policyhub.pipeline.steps.extract_rows import ExtractRowsStep
from policyhub.pipeline.steps.process_rows import ProcessRowsStep
from policyhub.pipeline.steps.cleanup_file import CleanupFileStep

__all__ = ["DetectFormatStep", "ExtractRowsStep", "ProcessRowsStep", "CleanupFileStep"]
