"""Lifecycle event models for cronloop."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SchedulerEvent(str, Enum):
    """Named lifecycle signals published by the scheduler."""

    STARTED = "started"
    STOPPED = "stopped"
    SCHEDULED = "scheduled"  # carries job id
    CANCELLED = "cancelled"  # carries job id
    INVOKED = "invoked"  # carries job id
    FAILED = "failed"  # carries job id; callback raised


class SchedulerEventRecord(BaseModel):
    """A published lifecycle event."""

    model_config = ConfigDict(frozen=True)

    kind: SchedulerEvent = Field(..., description="Event kind")
    job_id: str | None = Field(default=None, description="Job the event refers to")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When the event was published",
    )
