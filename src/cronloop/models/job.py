"""Job record models for cronloop."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from collections.abc import Callable

    from cronloop.scheduler.expression import CronExpression


@dataclass
class Job:
    """A scheduled callback, owned and mutated by the scheduler loop.

    ``next_invocation`` stays None until the first tick that observes the job.
    """

    id: str
    expression: CronExpression
    callback: Callable[[], Any]
    name: str
    next_invocation: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    last_invocation: datetime | None = None
    invocation_count: int = 0
    failure_count: int = 0
    last_error: str | None = None

    def is_due(self, now: datetime) -> bool:
        """Check if the job should fire at ``now``.

        Args:
            now: Current time.

        Returns:
            True if armed and the next invocation is at or before now.
        """
        if self.next_invocation is None:
            return False
        return self.next_invocation <= now

    def snapshot(self) -> JobSnapshot:
        """Return an immutable copy of the job's public state."""
        return JobSnapshot(
            id=self.id,
            name=self.name,
            expression=self.expression.source,
            next_invocation=self.next_invocation,
            created_at=self.created_at,
            last_invocation=self.last_invocation,
            invocation_count=self.invocation_count,
            failure_count=self.failure_count,
            last_error=self.last_error,
        )


class JobSnapshot(BaseModel):
    """Read-only view of a scheduled job."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique job identifier")
    name: str = Field(..., description="Human-readable job name")
    expression: str = Field(..., description="Cron expression")
    next_invocation: datetime | None = Field(
        default=None,
        description="Next scheduled invocation, None until first observed by a tick",
    )
    created_at: datetime = Field(..., description="Registration timestamp")
    last_invocation: datetime | None = Field(default=None, description="Last invocation time")
    invocation_count: int = Field(default=0, description="Total number of invocations")
    failure_count: int = Field(default=0, description="Number of invocations that raised")
    last_error: str | None = Field(default=None, description="Error from last failed invocation")
