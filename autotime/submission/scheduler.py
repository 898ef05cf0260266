"""
Submission Scheduler - Serialized, Rate-Limited Entry Submission

Pushes synthesized entries to BigTime strictly one at a time. A single
worker consumes the queue, so at most one request is ever in flight, and
it waits a fixed delay after every successful submission before sending
the next one.

The first failure aborts the run: the rest of the queue is discarded,
nothing is retried or rolled back, and SubmissionError is raised.

Usage:
    from autotime.submission.scheduler import SubmissionScheduler

    scheduler = SubmissionScheduler(submit=submit_entry, delay_seconds=2.0)
    report = await scheduler.run(flatten_schedules(schedules))
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from autotime.errors import SubmissionError
from autotime.generation.models import DaySchedule, TimeEntry
from autotime.logging_config import get_logger

logger = get_logger(__name__)

SubmitFn = Callable[[TimeEntry], Awaitable[Any]]
SleepFn = Callable[[float], Awaitable[Any]]


def flatten_schedules(schedules: Iterable[DaySchedule]) -> list[TimeEntry]:
    """Day-major, then within-day insertion order."""
    return [entry for schedule in schedules for entry in schedule.entries]


@dataclass(frozen=True)
class SubmissionReport:
    """Outcome of a completed submission run."""

    submitted: tuple[TimeEntry, ...]
    total: int
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: datetime = field(default_factory=datetime.now)


class SubmissionScheduler:
    """
    Single-consumer work queue with a post-completion delay.

    Entries are submitted in the order they were enqueued; nothing
    reorders the queue.
    """

    # One request in flight, ever
    CONCURRENCY = 1

    def __init__(
        self,
        submit: SubmitFn,
        delay_seconds: float = 2.0,
        sleep: SleepFn = asyncio.sleep,
    ):
        """
        Initialize the scheduler.

        Args:
            submit: Coroutine function that creates one entry remotely
            delay_seconds: Wait after each successful submission
            sleep: Awaitable sleep (tests inject a recorder)
        """
        if delay_seconds < 0:
            raise ValueError("delay_seconds cannot be negative")
        self._submit = submit
        self._delay = delay_seconds
        self._sleep = sleep

        self._submitted: list[TimeEntry] = []
        self._failed = False

    @property
    def submitted(self) -> tuple[TimeEntry, ...]:
        return tuple(self._submitted)

    @property
    def stats(self) -> dict[str, Any]:
        return {
            "submitted": len(self._submitted),
            "failed": self._failed,
            "delay_seconds": self._delay,
        }

    async def run(self, entries: Iterable[TimeEntry]) -> SubmissionReport:
        """
        Submit every entry in order. Each call is a fresh run; `submitted`
        and `stats` describe the most recent one.

        Raises:
            SubmissionError: On the first failed submission. Entries already
                submitted stay submitted; later ones are never attempted.
        """
        started_at = datetime.now()
        self._submitted = []
        self._failed = False
        queue: asyncio.Queue[TimeEntry] = asyncio.Queue()
        for entry in entries:
            queue.put_nowait(entry)
        total = queue.qsize()

        logger.info("submission_started", total=total, delay_seconds=self._delay)

        workers = [asyncio.create_task(self._worker(queue, total)) for _ in range(self.CONCURRENCY)]
        await asyncio.gather(*workers)

        logger.info("submission_finished", submitted=len(self._submitted), total=total)
        return SubmissionReport(
            submitted=tuple(self._submitted),
            total=total,
            started_at=started_at,
            finished_at=datetime.now(),
        )

    async def _worker(self, queue: asyncio.Queue[TimeEntry], total: int) -> None:
        while not queue.empty():
            entry = queue.get_nowait()
            index = len(self._submitted)

            try:
                await self._submit(entry)
            except Exception as e:
                self._failed = True
                dropped = self._drain(queue)
                logger.error(
                    "submission_failed",
                    index=index,
                    date=entry.date.isoformat(),
                    project=entry.project_name,
                    hours=entry.hours,
                    submitted=index,
                    dropped=dropped,
                    error=str(e),
                )
                raise SubmissionError(
                    f"Failed to submit entry {index + 1} of {total} "
                    f"({entry.date.isoformat()}, {entry.project_name}, {entry.hours}h): {e}",
                    entry=entry,
                    index=index,
                    submitted_count=index,
                ) from e
            finally:
                queue.task_done()

            self._submitted.append(entry)
            logger.info(
                "entry_submitted",
                index=index,
                date=entry.date.isoformat(),
                project=entry.project_name,
                hours=entry.hours,
            )

            if not queue.empty():
                await self._sleep(self._delay)

    @staticmethod
    def _drain(queue: asyncio.Queue[TimeEntry]) -> int:
        dropped = 0
        while not queue.empty():
            queue.get_nowait()
            queue.task_done()
            dropped += 1
        return dropped


__all__ = ["SubmissionReport", "SubmissionScheduler", "flatten_schedules"]
