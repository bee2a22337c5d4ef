"""
Ingestion Pipeline — step-based bulk file ingestion.

This package provides the step-based pipeline engine that turns an
uploaded spreadsheet or CSV into users, accounts and policies, with
per-step logging, per-row error isolation, and audit tracking.
"""

from policyhub.pipeline.engine import PipelineEngine, PipelineResult
from policyhub.pipeline.context import PipelineContext, StepResult
from policyhub.pipeline.report import BatchFailure, IngestionReport, RowFailure
from policyhub.pipeline.step import PipelineStep

__all__ = [
    "PipelineEngine",
    "PipelineResult",
    "PipelineContext",
    "PipelineStep",
    "StepResult",
    "BatchFailure",
    "IngestionReport",
    "RowFailure",
]
