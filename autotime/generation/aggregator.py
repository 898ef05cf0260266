"""
Tool: History Aggregator
Purpose: Group historical BigTime entries by project and date and derive
per-project statistics

Nothing is dropped or deduplicated here; excluded projects are filtered
later when the weighted pool is built.

Usage:
    from autotime.generation.aggregator import aggregate_history

    summary = aggregate_history(entries)
    summary.average_daily_hours
    summary.projects  # tuple[ProjectSummary, ...]
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from datetime import date
from typing import Any

from autotime.errors import EmptyHistoryError
from autotime.generation.models import HistoricalSummary, ProjectSummary, TimeEntry
from autotime.logging_config import get_logger

logger = get_logger(__name__)


def summarize_project(entries: list[TimeEntry]) -> ProjectSummary:
    """
    Build the summary for one project group.

    Labels (name, client) come from the last entry in the group, so a
    renamed project is reported under its newest name.
    """
    last = entries[-1]
    total_hours = sum(e.hours for e in entries)
    return ProjectSummary(
        project_id=last.project_id,
        project_name=last.project_name,
        client_name=last.client_name,
        client_id=last.client_id,
        total_hours=total_hours,
        total_entries=len(entries),
        average_entry_hours=total_hours / len(entries),
    )


def aggregate_history(entries: Iterable[TimeEntry]) -> HistoricalSummary:
    """
    Group entries by project and by date and compute summary statistics.

    Args:
        entries: Historical entries in the order BigTime returned them

    Returns:
        HistoricalSummary with both groupings and one ProjectSummary per project

    Raises:
        EmptyHistoryError: If there are no entries (average daily hours
            would otherwise be a division by zero)
    """
    by_project: dict[Any, list[TimeEntry]] = defaultdict(list)
    by_date: dict[date, list[TimeEntry]] = defaultdict(list)
    entry_count = 0

    for entry in entries:
        by_project[entry.project_id].append(entry)
        by_date[entry.date].append(entry)
        entry_count += 1

    if entry_count == 0:
        raise EmptyHistoryError("Historical window returned no time entries")

    total_hours = sum(e.hours for day in by_date.values() for e in day)
    projects = tuple(summarize_project(group) for group in by_project.values())

    summary = HistoricalSummary(
        by_project={key: tuple(group) for key, group in by_project.items()},
        by_date={key: tuple(group) for key, group in by_date.items()},
        projects=projects,
        entry_count=entry_count,
        total_hours=total_hours,
        average_daily_hours=total_hours / len(by_date),
    )

    logger.info(
        "history_aggregated",
        entries=entry_count,
        projects=summary.project_count,
        dates=summary.date_count,
        total_hours=round(total_hours, 2),
        average_daily_hours=round(summary.average_daily_hours, 2),
    )
    return summary


__all__ = ["aggregate_history", "summarize_project"]
