"""Error classification for cronloop."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Classification of scheduler errors."""

    CONFIG = "config"  # Bad constructor or config file input
    EXPRESSION = "expression"  # Unparseable schedule expression
    LIFECYCLE = "lifecycle"  # start/stop called in the wrong state
    LOOKUP = "lookup"  # Unknown job id


@dataclass
class CronLoopError(Exception):
    """Base error with classification and context."""

    message: str
    kind: ErrorKind
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"

    def __post_init__(self) -> None:
        # Call Exception.__init__ with the message
        super().__init__(self.message)


@dataclass
class InvalidConfigError(CronLoopError):
    """Raised when scheduler configuration is malformed."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message=message, kind=ErrorKind.CONFIG, context=context)


@dataclass
class InvalidExpressionError(CronLoopError):
    """Raised when a schedule expression cannot be parsed."""

    def __init__(self, expression: str, reason: str) -> None:
        super().__init__(
            message=f"Invalid cron expression '{expression}': {reason}",
            kind=ErrorKind.EXPRESSION,
            context={"expression": expression},
        )

    @property
    def expression(self) -> str:
        return str(self.context["expression"])


@dataclass
class AlreadyRunningError(CronLoopError):
    """Raised by start() while the scheduler is running or stopping."""

    def __init__(self, message: str = "Scheduler is already running") -> None:
        super().__init__(message=message, kind=ErrorKind.LIFECYCLE)


@dataclass
class NotRunningError(CronLoopError):
    """Raised by stop() while the scheduler is idle."""

    def __init__(self, message: str = "Scheduler is not running") -> None:
        super().__init__(message=message, kind=ErrorKind.LIFECYCLE)


@dataclass
class UnknownJobError(CronLoopError):
    """Raised when a job id is not present in the job table."""

    def __init__(self, job_id: str) -> None:
        super().__init__(
            message=f"Invalid job id '{job_id}'",
            kind=ErrorKind.LOOKUP,
            context={"job_id": job_id},
        )

    @property
    def job_id(self) -> str:
        return str(self.context["job_id"])
