"""Thread-safe job table."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from cronloop.errors import UnknownJobError

if TYPE_CHECKING:
    from cronloop.models.job import Job


class JobTable:
    """Ordered mapping of job id to Job, guarded by a re-entrant lock.

    The scheduler loop iterates over ``snapshot()`` copies, so callers may add
    or remove jobs from any thread while a tick is running.
    """

    def __init__(self) -> None:
        self._jobs: dict[str, Job] = {}
        self._lock = threading.RLock()

    def add(self, job: Job) -> None:
        """Insert a job.

        Raises:
            ValueError: If a job with the same id is already present.
        """
        with self._lock:
            if job.id in self._jobs:
                msg = f"Duplicate job id: {job.id}"
                raise ValueError(msg)
            self._jobs[job.id] = job

    def remove(self, job_id: str) -> Job:
        """Remove and return a job.

        Raises:
            UnknownJobError: If the id is not present.
        """
        with self._lock:
            try:
                return self._jobs.pop(job_id)
            except KeyError:
                raise UnknownJobError(job_id) from None

    def get(self, job_id: str) -> Job:
        """Look up a job by id.

        Raises:
            UnknownJobError: If the id is not present.
        """
        with self._lock:
            job = self._jobs.get(job_id)
        if job is None:
            raise UnknownJobError(job_id)
        return job

    def contains(self, job_id: str) -> bool:
        with self._lock:
            return job_id in self._jobs

    def snapshot(self) -> list[Job]:
        """Return the live jobs in insertion order."""
        with self._lock:
            return list(self._jobs.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def __contains__(self, job_id: object) -> bool:
        return isinstance(job_id, str) and self.contains(job_id)
