"""
Task Scheduler — durable one-shot message scheduling with crash recovery.
"""

from policyhub.scheduler.errors import SchedulerError, ScheduleValidationError, TaskNotFoundError
from policyhub.scheduler.service import (
    ScheduleResult,
    TaskScheduler,
    generate_job_id,
    process_message,
    resolve_instant,
)

__all__ = [
    "SchedulerError",
    "ScheduleValidationError",
    "TaskNotFoundError",
    "ScheduleResult",
    "TaskScheduler",
    "generate_job_id",
    "process_message",
    "resolve_instant",
]
