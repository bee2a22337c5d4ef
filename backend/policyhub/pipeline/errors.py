"""
Domain-specific exception hierarchy for the ingestion pipeline.

All pipeline exceptions inherit from PipelineError so callers can
catch broadly or narrowly as needed.  Each exception carries structured
context (step name, execution ID, etc.) for logging/debugging.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(
        self,
        message: str,
        *,
        execution_id: str | None = None,
        step_name: str | None = None,
        details: dict | None = None,
    ) -> None:
        self.execution_id = execution_id
        self.step_name = step_name
        self.details = details or {}
        super().__init__(message)


class UnsupportedFileTypeError(PipelineError):
    """The declared type or extension is not a supported tabular format."""
    pass


class ParseError(PipelineError):
    """The input file could not be decoded.  Aborts the whole batch."""
    pass


class RowError(PipelineError):
    """A single row failed; carries the 1-based row number."""

    def __init__(self, message: str, *, row: int, **kwargs) -> None:
        self.row = row
        super().__init__(message, **kwargs)


class UploadValidationError(PipelineError):
    """An uploaded file was rejected before dispatch (missing, too large, wrong type)."""
    pass
