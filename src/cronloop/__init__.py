"""cronloop: in-process cron scheduler with clock-jump handling."""

from cronloop.config import SchedulerConfig, load_config
from cronloop.errors import (
    AlreadyRunningError,
    CronLoopError,
    ErrorKind,
    InvalidConfigError,
    InvalidExpressionError,
    NotRunningError,
    UnknownJobError,
)
from cronloop.models import JobSnapshot, SchedulerEvent, SchedulerEventRecord
from cronloop.scheduler import EventNotifier, Scheduler, SchedulerState

__version__ = "0.1.0"

__all__ = [
    "AlreadyRunningError",
    "CronLoopError",
    "ErrorKind",
    "EventNotifier",
    "InvalidConfigError",
    "InvalidExpressionError",
    "JobSnapshot",
    "NotRunningError",
    "Scheduler",
    "SchedulerConfig",
    "SchedulerEvent",
    "SchedulerEventRecord",
    "SchedulerState",
    "UnknownJobError",
    "__version__",
    "load_config",
]
