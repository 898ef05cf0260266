"""
Generation data structures.

TimeEntry is the unit that flows through the whole pipeline: parsed from
BigTime history, synthesized by the allocator, submitted by the scheduler
and written to the results file.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from dateutil import parser as date_parser


def parse_bigtime_date(value: Any) -> date:
    """Parse a BigTime ``Dt`` value ("2024-03-01" or "2024-03-01T00:00:00")."""
    if isinstance(value, date):
        return value
    return date_parser.isoparse(str(value)).date()


@dataclass(frozen=True)
class TimeEntry:
    """One logged or synthesized unit of time against a project on a date."""

    date: date
    project_id: Any
    project_name: str
    client_name: str | None
    client_id: Any
    hours: float

    @classmethod
    def from_bigtime(cls, raw: dict[str, Any]) -> TimeEntry:
        """Create from a raw BigTime timesheet record."""
        return cls(
            date=parse_bigtime_date(raw["Dt"]),
            project_id=raw["ProjectSID"],
            project_name=raw.get("ProjectNm") or "",
            client_name=raw.get("ClientNm"),
            client_id=raw.get("ClientID"),
            hours=float(raw.get("Hours_IN") or 0),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "date": self.date.isoformat(),
            "project_id": self.project_id,
            "project_name": self.project_name,
            "client_name": self.client_name,
            "client_id": self.client_id,
            "hours": self.hours,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TimeEntry:
        """Create from dictionary."""
        return cls(
            date=parse_bigtime_date(data["date"]),
            project_id=data["project_id"],
            project_name=data.get("project_name", ""),
            client_name=data.get("client_name"),
            client_id=data.get("client_id"),
            hours=float(data["hours"]),
        )


@dataclass(frozen=True)
class ProjectSummary:
    """Historical statistics for one project. Doubles as the entry template."""

    project_id: Any
    project_name: str
    client_name: str | None
    client_id: Any
    total_hours: float
    total_entries: int
    average_entry_hours: float

    def make_entry(self, entry_date: date, hours: float) -> TimeEntry:
        return TimeEntry(
            date=entry_date,
            project_id=self.project_id,
            project_name=self.project_name,
            client_name=self.client_name,
            client_id=self.client_id,
            hours=hours,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "project_id": self.project_id,
            "project_name": self.project_name,
            "client_name": self.client_name,
            "client_id": self.client_id,
            "total_hours": self.total_hours,
            "total_entries": self.total_entries,
            "average_entry_hours": self.average_entry_hours,
        }


@dataclass(frozen=True)
class HistoricalSummary:
    """Grouped history plus the aggregate metadata derived from it."""

    by_project: dict[Any, tuple[TimeEntry, ...]]
    by_date: dict[date, tuple[TimeEntry, ...]]
    projects: tuple[ProjectSummary, ...]
    entry_count: int
    total_hours: float
    average_daily_hours: float

    @property
    def project_count(self) -> int:
        return len(self.by_project)

    @property
    def date_count(self) -> int:
        return len(self.by_date)

    def to_dict(self) -> dict[str, Any]:
        return {
            "entry_count": self.entry_count,
            "project_count": self.project_count,
            "date_count": self.date_count,
            "total_hours": self.total_hours,
            "average_daily_hours": self.average_daily_hours,
            "projects": [p.to_dict() for p in self.projects],
        }


@dataclass
class DaySchedule:
    """Synthesized entries for one calendar date. Only ever appended to."""

    date: date
    existing_hours: float = 0.0
    entries: list[TimeEntry] = field(default_factory=list)
    attempts: int = 0

    @property
    def synthesized_hours(self) -> float:
        return sum(e.hours for e in self.entries)

    @property
    def total_hours(self) -> float:
        return self.existing_hours + self.synthesized_hours


def existing_hours_by_date(entries: list[TimeEntry] | tuple[TimeEntry, ...]) -> dict[date, float]:
    """Reduce the pre-existing window to logged hours per date."""
    totals: dict[date, float] = {}
    for entry in entries:
        totals[entry.date] = totals.get(entry.date, 0.0) + entry.hours
    return totals


__all__ = [
    "DaySchedule",
    "HistoricalSummary",
    "ProjectSummary",
    "TimeEntry",
    "existing_hours_by_date",
    "parse_bigtime_date",
]
