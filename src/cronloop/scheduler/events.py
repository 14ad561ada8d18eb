"""Lifecycle event fan-out for the scheduler."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable

from cronloop.models.events import SchedulerEvent, SchedulerEventRecord

logger = logging.getLogger(__name__)

EventListener = Callable[[SchedulerEventRecord], None]


class EventNotifier:
    """Fire-and-forget publisher of scheduler lifecycle events.

    Listeners are called synchronously on the publishing thread. A listener
    that raises is logged and skipped; it never affects scheduling.
    """

    def __init__(self) -> None:
        """Initialize an empty listener registry."""
        self._listeners: list[tuple[EventListener, frozenset[SchedulerEvent] | None]] = []
        self._lock = threading.Lock()

    def subscribe(
        self,
        listener: EventListener,
        kinds: Iterable[SchedulerEvent | str] | None = None,
    ) -> Callable[[], None]:
        """Register a listener.

        Args:
            listener: Called with each matching event record.
            kinds: Event kinds to receive; all kinds if omitted.

        Returns:
            A function that removes the listener when called.
        """
        wanted = frozenset(SchedulerEvent(k) for k in kinds) if kinds is not None else None
        entry = (listener, wanted)

        with self._lock:
            self._listeners.append(entry)

        def unsubscribe() -> None:
            with self._lock:
                if entry in self._listeners:
                    self._listeners.remove(entry)

        return unsubscribe

    def publish(self, kind: SchedulerEvent, job_id: str | None = None) -> SchedulerEventRecord:
        """Deliver an event to every interested listener.

        Args:
            kind: The event kind.
            job_id: Job the event refers to, if any.

        Returns:
            The published record.
        """
        record = SchedulerEventRecord(kind=kind, job_id=job_id)

        with self._lock:
            listeners = [
                listener
                for listener, wanted in self._listeners
                if wanted is None or kind in wanted
            ]

        for listener in listeners:
            try:
                listener(record)
            except Exception:
                logger.exception(f"Event listener failed while handling '{kind.value}'")

        return record

    @property
    def listener_count(self) -> int:
        """Number of registered listeners."""
        with self._lock:
            return len(self._listeners)
