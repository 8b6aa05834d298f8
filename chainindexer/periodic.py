"""Running jobs at fixed intervals."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Optional, Union

logger = logging.getLogger(__name__)

Interval = Union[timedelta, float, int]


def watch_method(method: Callable[[], object]) -> bool:
    """Run a periodic job, logging its failure instead of raising it.

    Returns True when the job completed and False when it raised.
    """
    try:
        method()
    except Exception as exc:
        name = getattr(method, "__qualname__", repr(method))
        logger.error("error while running periodic operation %s: %s", name, exc)
        return False
    return True


@dataclass
class _Job:
    interval: float
    job: Callable[[], object]
    next_run: Optional[float] = None


class PeriodicScheduler:
    """Keeps jobs and runs the ones that are due.

    A job first runs on the first call to ``run_pending`` after it was
    registered, then once every interval.
    """

    def __init__(self) -> None:
        self._jobs: list[_Job] = []

    @property
    def jobs(self) -> tuple[tuple[float, Callable[[], object]], ...]:
        """The registered jobs as (interval in seconds, job) pairs."""
        return tuple((job.interval, job.job) for job in self._jobs)

    def every(self, interval: Interval, job: Callable[[], object]) -> None:
        """Register a job to run every interval (seconds or a timedelta)."""
        if isinstance(interval, timedelta):
            seconds = interval.total_seconds()
        elif isinstance(interval, bool) or not isinstance(interval, (int, float)):
            raise ValueError(f"invalid interval: {interval!r}")
        else:
            seconds = float(interval)
        if not seconds > 0:
            raise ValueError(f"the interval must be positive, got {interval!r}")
        if not callable(job):
            raise ValueError("the job must be callable")
        self._jobs.append(_Job(seconds, job))

    def run_pending(self, now: float) -> int:
        """Run the jobs due at ``now`` (seconds) and return how many ran."""
        ran = 0
        for job in self._jobs:
            if job.next_run is None or now >= job.next_run:
                job.next_run = now + job.interval
                job.job()
                ran += 1
        return ran