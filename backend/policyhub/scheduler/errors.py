"""
Scheduler exception hierarchy.

Everything the scheduler raises to callers derives from SchedulerError.
Storage failures are not wrapped: they propagate as the database raised them.
"""

from __future__ import annotations


class SchedulerError(Exception):
    """Base exception for task scheduler errors."""

    def __init__(self, message: str, *, job_id: str | None = None) -> None:
        self.job_id = job_id
        super().__init__(message)


class ScheduleValidationError(SchedulerError):
    """Bad message, date or time, or an instant that is not in the future."""
    pass


class TaskNotFoundError(SchedulerError):
    """No pending task with that job id (unknown, or already terminal)."""
    pass
