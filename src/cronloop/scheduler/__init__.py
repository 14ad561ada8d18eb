"""cronloop scheduling system.

This module provides the polling scheduler loop, the thread-safe job table,
lifecycle event fan-out, and cron expression evaluation via APScheduler
triggers.
"""

from .events import EventListener, EventNotifier
from .expression import CronExpression, parse_expression, preview_fire_times, validate_expression
from .service import Scheduler, SchedulerState
from .table import JobTable

__all__ = [
    "CronExpression",
    "EventListener",
    "EventNotifier",
    "JobTable",
    "Scheduler",
    "SchedulerState",
    "parse_expression",
    "preview_fire_times",
    "validate_expression",
]
