"""Data models for cronloop."""

from cronloop.models.events import SchedulerEvent, SchedulerEventRecord
from cronloop.models.job import Job, JobSnapshot

__all__ = [
    "Job",
    "JobSnapshot",
    "SchedulerEvent",
    "SchedulerEventRecord",
]
