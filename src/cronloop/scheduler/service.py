"""Polling scheduler loop for cronloop jobs."""

from __future__ import annotations

import logging
import threading
import uuid
from concurrent.futures import Future
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from cronloop.config import SchedulerConfig
from cronloop.errors import AlreadyRunningError, NotRunningError
from cronloop.models.events import SchedulerEvent
from cronloop.models.job import Job, JobSnapshot

from .events import EventNotifier
from .expression import parse_expression
from .table import JobTable

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600


def _local_now() -> datetime:
    return datetime.now().astimezone()


class SchedulerState(str, Enum):
    """Lifecycle state of a Scheduler."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPING = "stopping"


class Scheduler:
    """In-process cron scheduler driven by a single polling thread.

    Every ``tick_interval_ms`` the loop evaluates all jobs against the current
    time. A job is armed the first time a tick sees it and fires on later ticks
    once its next invocation is at or before now. Each tick advances a due job
    by exactly one occurrence, so missed occurrences are caught up one per tick.
    When consecutive ticks are ``drift_threshold_hours`` or more apart the clock
    is assumed to have jumped and every job is re-armed from the current time
    instead of being caught up.

    Example:
        ```python
        scheduler = Scheduler({"tick_interval_ms": 250})
        job_id = scheduler.schedule("*/5 * * * *", refresh_cache)
        scheduler.start()
        ...
        scheduler.stop().result()
        ```
    """

    def __init__(
        self,
        config: SchedulerConfig | dict[str, Any] | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
        notifier: EventNotifier | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            config: SchedulerConfig or mapping of its fields.
            clock: Returns the current timezone-aware time.
            notifier: Event notifier to publish lifecycle events on.

        Raises:
            InvalidConfigError: If config is not a mapping or has invalid values.
        """
        self._config = SchedulerConfig.from_value(config)
        self._clock = clock or _local_now
        self._events = notifier or EventNotifier()
        self._table = JobTable()

        self._state = SchedulerState.IDLE
        self._state_lock = threading.Lock()
        self._tick_lock = threading.Lock()
        self._wake = threading.Event()
        self._thread: threading.Thread | None = None
        self._stop_future: Future[None] | None = None
        self._last_tick_time: datetime | None = None

    @property
    def config(self) -> SchedulerConfig:
        """The active configuration."""
        return self._config

    @property
    def events(self) -> EventNotifier:
        """Lifecycle event feed."""
        return self._events

    @property
    def state(self) -> SchedulerState:
        """Current lifecycle state."""
        return self._state

    @property
    def is_running(self) -> bool:
        """Check if the loop is active (running or finishing a stop)."""
        return self._state is not SchedulerState.IDLE

    @property
    def last_tick_time(self) -> datetime | None:
        """Time observed by the most recent completed tick."""
        return self._last_tick_time

    def _generate_id(self) -> str:
        return uuid.uuid4().hex

    # -- job table -----------------------------------------------------------

    def schedule(
        self,
        expression: str,
        callback: Callable[[], Any],
        *,
        name: str | None = None,
    ) -> str:
        """Register a callback against a cron expression.

        The next invocation time is computed lazily by the first tick that
        sees the job.

        Args:
            expression: 5 or 6 field cron expression.
            callback: Zero-argument callable to invoke when due.
            name: Optional label, defaults to the callback's qualified name.

        Returns:
            The new job ID.

        Raises:
            InvalidExpressionError: If the expression cannot be parsed.
            TypeError: If callback is not callable.
        """
        if not callable(callback):
            msg = f"callback must be callable, got {type(callback).__name__}"
            raise TypeError(msg)

        parsed = parse_expression(expression, self._config.timezone)
        job = Job(
            id=self._generate_id(),
            expression=parsed,
            callback=callback,
            name=name or getattr(callback, "__qualname__", repr(callback)),
        )
        self._table.add(job)

        logger.info(f"Scheduled job '{job.name}' ({job.id}) with expression '{expression}'")
        self._events.publish(SchedulerEvent.SCHEDULED, job.id)
        return job.id

    def cancel(self, job_id: str) -> None:
        """Remove a job from future consideration.

        A callback already executing is not interrupted.

        Args:
            job_id: The job ID returned by schedule().

        Raises:
            UnknownJobError: If the job does not exist.
        """
        job = self._table.remove(job_id)

        logger.info(f"Cancelled job '{job.name}' ({job.id})")
        self._events.publish(SchedulerEvent.CANCELLED, job.id)

    def get_job(self, job_id: str) -> JobSnapshot:
        """Get a read-only view of a job.

        Raises:
            UnknownJobError: If the job does not exist.
        """
        return self._table.get(job_id).snapshot()

    def list_jobs(self) -> list[JobSnapshot]:
        """List all jobs in registration order."""
        return [job.snapshot() for job in self._table.snapshot()]

    def get_next_run(self, job_id: str) -> datetime | None:
        """Get the next invocation time of a job, None if not yet armed.

        Raises:
            UnknownJobError: If the job does not exist.
        """
        return self._table.get(job_id).next_invocation

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._table

    # -- lifecycle -----------------------------------------------------------

    def start(self) -> None:
        """Start the tick loop on a background thread.

        Raises:
            AlreadyRunningError: If the scheduler is running or stopping.
        """
        with self._state_lock:
            if self._state is not SchedulerState.IDLE:
                raise AlreadyRunningError(f"Scheduler is already {self._state.value}")

            self._state = SchedulerState.RUNNING
            self._wake.clear()
            thread = threading.Thread(
                target=self._run_loop,
                name="cronloop-ticker",
                daemon=True,
            )
            self._thread = thread

        logger.info(f"Scheduler started (tick interval {self._config.tick_interval_ms}ms)")
        self._events.publish(SchedulerEvent.STARTED)
        thread.start()

    def stop(self) -> Future[None]:
        """Request the loop to stop after its current tick.

        Calls made while a stop is pending return the same future.

        Returns:
            Future resolved once the loop is idle and ``stopped`` was published.

        Raises:
            NotRunningError: If the scheduler is idle.
        """
        with self._state_lock:
            if self._state is SchedulerState.IDLE:
                raise NotRunningError()

            if self._stop_future is None:
                future: Future[None] = Future()
                # Mark running so callers cannot cancel the handle
                future.set_running_or_notify_cancel()
                self._stop_future = future
                self._state = SchedulerState.STOPPING
                self._wake.set()
                logger.info("Scheduler stop requested")

            return self._stop_future

    def shutdown(self, wait: bool = True, timeout: float | None = None) -> None:
        """Stop the scheduler if it is running.

        Args:
            wait: Whether to block until the loop has stopped.
            timeout: Maximum seconds to wait.
        """
        try:
            future = self.stop()
        except NotRunningError:
            return

        # Waiting from a callback would block the loop that resolves the future
        if wait and threading.current_thread() is not self._thread:
            future.result(timeout)

    def __enter__(self) -> Scheduler:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.shutdown(wait=True)

    def _stop_requested(self) -> bool:
        return self._state is SchedulerState.STOPPING

    def _run_loop(self) -> None:
        try:
            while True:
                self.tick()
                if self._stop_requested():
                    break
                self._wake.wait(self._config.tick_interval)
                if self._stop_requested():
                    break
        except Exception:
            logger.exception("Scheduler loop crashed")
        finally:
            self._finish_stop()

    def _finish_stop(self) -> None:
        # stopped goes out while still STOPPING; start() is rejected until IDLE
        logger.info("Scheduler stopped")
        self._events.publish(SchedulerEvent.STOPPED)

        with self._state_lock:
            self._state = SchedulerState.IDLE
            self._thread = None
            future, self._stop_future = self._stop_future, None

        if future is not None:
            future.set_result(None)

    # -- ticking -------------------------------------------------------------

    def tick(self, now: datetime | None = None) -> None:
        """Run one evaluation pass over every job.

        Called by the loop thread; may also be called directly to drive the
        scheduler deterministically.

        Args:
            now: Time to evaluate against (defaults to the clock).
        """
        with self._tick_lock:
            now = now or self._clock()

            previous = self._last_tick_time
            if previous is not None and self._is_clock_jump(previous, now):
                self._reset_schedules(previous, now)

            # Re-read the table: jobs may have been added or removed meanwhile
            for job in self._table.snapshot():
                if not self._table.contains(job.id):
                    continue

                occurrence = job.next_invocation
                if occurrence is None:
                    job.next_invocation = job.expression.next_after(now)
                    logger.debug(f"Armed job '{job.name}' for {job.next_invocation}")
                elif job.is_due(now):
                    self._invoke(job, occurrence, now)

            self._last_tick_time = now

    def _is_clock_jump(self, previous: datetime, now: datetime) -> bool:
        gap = abs((now - previous).total_seconds())
        return int(gap // SECONDS_PER_HOUR) >= self._config.drift_threshold_hours

    def _reset_schedules(self, previous: datetime, now: datetime) -> None:
        logger.warning(
            f"Clock jumped from {previous} to {now}; re-arming all jobs without catching up"
        )
        for job in self._table.snapshot():
            job.next_invocation = job.expression.next_after(now)

    def _invoke(self, job: Job, occurrence: datetime, now: datetime) -> None:
        logger.debug(f"Invoking job '{job.name}' ({job.id}) for {occurrence}")
        failed = False
        try:
            job.callback()
        except Exception as e:
            failed = True
            job.failure_count += 1
            job.last_error = str(e)
            logger.exception(f"Job '{job.name}' ({job.id}) raised: {e}")

        job.invocation_count += 1
        job.last_invocation = now

        self._events.publish(SchedulerEvent.INVOKED, job.id)
        if failed:
            self._events.publish(SchedulerEvent.FAILED, job.id)

        job.next_invocation = job.expression.next_after(occurrence)
