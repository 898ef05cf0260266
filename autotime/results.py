"""
Result persistence.

Writes the generated schedule as a nested JSON array (one inner list per
day) to results/YYYY-MM-DD-<epoch-millis>.json.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from autotime.generation.models import DaySchedule, TimeEntry
from autotime.logging_config import get_logger

logger = get_logger(__name__)


def results_filename(now: datetime) -> str:
    return f"{now:%Y-%m-%d}-{int(now.timestamp() * 1000)}.json"


def save_results(
    schedules: Iterable[DaySchedule],
    results_dir: Path,
    now: datetime | None = None,
) -> Path:
    """Serialize the schedule and return the file it was written to."""
    now = now or datetime.now()
    results_dir.mkdir(parents=True, exist_ok=True)
    path = results_dir / results_filename(now)

    payload = [[entry.to_dict() for entry in schedule.entries] for schedule in schedules]
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)

    logger.info("results_saved", path=str(path), days=len(payload))
    return path


def load_results(path: Path) -> list[list[TimeEntry]]:
    with open(path, encoding="utf-8") as f:
        payload = json.load(f)
    return [[TimeEntry.from_dict(item) for item in day] for day in payload]


__all__ = ["load_results", "results_filename", "save_results"]
