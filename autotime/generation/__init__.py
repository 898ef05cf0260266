"""Generation - learn the project mix from history and synthesize days

Components:
    models.py:      TimeEntry, ProjectSummary, HistoricalSummary, DaySchedule
    aggregator.py:  Group history by project/date, per-project statistics
    weight_pool.py: Frequency-weighted project pool
    allocator.py:   Per-day sampling inside the [min, max) hours band

Data flows forward only: aggregator -> weight_pool -> allocator.
"""

from autotime.generation.aggregator import aggregate_history
from autotime.generation.allocator import DailyAllocator, window_dates
from autotime.generation.models import (
    DaySchedule,
    HistoricalSummary,
    ProjectSummary,
    TimeEntry,
    existing_hours_by_date,
)
from autotime.generation.weight_pool import WeightedPool, build_weighted_pool

__all__ = [
    "DailyAllocator",
    "DaySchedule",
    "HistoricalSummary",
    "ProjectSummary",
    "TimeEntry",
    "WeightedPool",
    "aggregate_history",
    "build_weighted_pool",
    "existing_hours_by_date",
    "window_dates",
]
