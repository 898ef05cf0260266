"""
Tool: Daily Allocator
Purpose: Fill each day of the window with sampled entries until the day
reaches the minimum hours without ever reaching the maximum

Per day:
    1. Start from the hours already logged in BigTime for that date
    2. Draw a project from the weighted pool
    3. Propose a duration near the project's average entry size
    4. Keep it if the day stays below max_daily_hours, otherwise redraw
    5. Stop once the day reaches min_daily_hours

The redraw loop is capped per day. Running out of attempts means the band
cannot be met with the current history and increment, and is reported as a
configuration error rather than spinning forever.

Usage:
    from autotime.generation.allocator import DailyAllocator, window_dates

    allocator = DailyAllocator(pool, min_daily_hours=8, max_daily_hours=9)
    schedules = allocator.allocate_window(window_dates(date.today(), 5), existing)
"""

from __future__ import annotations

import math
import random
from collections.abc import Iterable, Mapping
from datetime import date, timedelta

from autotime.errors import ConfigurationError, UnsatisfiableConstraintError
from autotime.generation.models import DaySchedule, ProjectSummary
from autotime.generation.weight_pool import WeightedPool
from autotime.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_ATTEMPTS_PER_DAY = 1000


def window_dates(end: date, days: int) -> list[date]:
    """Dates of the window, most recent first: end, end-1, ..., end-(days-1)."""
    if days < 1:
        raise ConfigurationError(f"Window must cover at least one day, got {days}")
    return [end - timedelta(days=offset) for offset in range(days)]


class DailyAllocator:
    """Samples entries for each day inside the [min, max) hours band."""

    def __init__(
        self,
        pool: WeightedPool,
        min_daily_hours: float,
        max_daily_hours: float,
        time_increment_minutes: int = 15,
        max_attempts_per_day: int = DEFAULT_MAX_ATTEMPTS_PER_DAY,
        rng: random.Random | None = None,
    ):
        if min_daily_hours >= max_daily_hours:
            raise UnsatisfiableConstraintError(
                f"min_daily_hours ({min_daily_hours}) must be below "
                f"max_daily_hours ({max_daily_hours})"
            )
        if not 1 <= time_increment_minutes <= 60 or 60 % time_increment_minutes:
            raise ConfigurationError(
                f"time_increment_minutes must divide 60 evenly, got {time_increment_minutes}"
            )
        if max_attempts_per_day < 1:
            raise ConfigurationError("max_attempts_per_day must be at least 1")

        self.pool = pool
        self.min_daily_hours = min_daily_hours
        self.max_daily_hours = max_daily_hours
        self.time_increment_minutes = time_increment_minutes
        self.max_attempts_per_day = max_attempts_per_day
        self.rng = rng or random.Random()

        self._increments_per_hour = 60 // time_increment_minutes

    def propose_duration(self, project: ProjectSummary) -> float:
        """
        Duration near the project's typical entry size.

        The average is rounded up or down to a whole hour (coin flip), then a
        random number of sub-hour increments is added.
        """
        rounding = math.ceil if self.rng.random() < 0.5 else math.floor
        hours = rounding(project.average_entry_hours)
        steps = self.rng.randrange(self._increments_per_hour)
        return float(hours) + steps / self._increments_per_hour

    def allocate_day(self, day: date, existing_hours: float = 0.0) -> DaySchedule:
        """
        Build the schedule for one date.

        Raises:
            UnsatisfiableConstraintError: If max_attempts_per_day draws do not
                bring the day up to min_daily_hours
        """
        schedule = DaySchedule(date=day, existing_hours=existing_hours)

        while schedule.total_hours < self.min_daily_hours:
            if schedule.attempts >= self.max_attempts_per_day:
                raise UnsatisfiableConstraintError(
                    f"Could not fill {day.isoformat()} into "
                    f"[{self.min_daily_hours}, {self.max_daily_hours}) hours after "
                    f"{schedule.attempts} draws (reached {schedule.total_hours:g} hours)"
                )
            schedule.attempts += 1

            project = self.pool.draw(self.rng)
            candidate = self.propose_duration(project)
            if candidate <= 0:
                continue

            if schedule.total_hours + candidate < self.max_daily_hours:
                schedule.entries.append(project.make_entry(day, candidate))

        logger.info(
            "day_allocated",
            date=day.isoformat(),
            existing_hours=existing_hours,
            synthesized_hours=schedule.synthesized_hours,
            entries=len(schedule.entries),
            attempts=schedule.attempts,
        )
        return schedule

    def allocate_window(
        self,
        dates: Iterable[date],
        existing_by_date: Mapping[date, float] | None = None,
    ) -> list[DaySchedule]:
        """One DaySchedule per date, in the order the dates are given."""
        existing_by_date = existing_by_date or {}
        return [self.allocate_day(day, existing_by_date.get(day, 0.0)) for day in dates]


__all__ = ["DEFAULT_MAX_ATTEMPTS_PER_DAY", "DailyAllocator", "window_dates"]
