"""Shared test fixtures for autotime tests.

This module provides common fixtures used across all test modules:
- Raw BigTime records and parsed history
- Seeded random sources
- A fake BigTime client that records calls
- A fake sleep that records delays instead of waiting

Usage:
    def test_something(history_entries, rng):
        ...
"""

from datetime import date
from pathlib import Path
from typing import Any

import pytest

from autotime.errors import BigTimeAPIError
from autotime.generation.models import ProjectSummary, TimeEntry


# ─────────────────────────────────────────────────────────────────────────────
# Path Constants
# ─────────────────────────────────────────────────────────────────────────────

PROJECT_ROOT = Path(__file__).parent.parent
PACKAGE_DIR = PROJECT_ROOT / "autotime"


# ─────────────────────────────────────────────────────────────────────────────
# Builders
# ─────────────────────────────────────────────────────────────────────────────


def make_raw(
    project_id: int,
    name: str,
    dt: str,
    hours: float,
    client: str = "Acme Corp",
    client_id: int = 900,
) -> dict[str, Any]:
    """One raw BigTime timesheet record."""
    return {
        "ProjectSID": project_id,
        "ProjectNm": name,
        "ClientNm": client,
        "ClientID": client_id,
        "Dt": dt,
        "Hours_IN": hours,
    }


def make_summary(
    project_id: int,
    name: str,
    total_entries: int,
    average: float,
) -> ProjectSummary:
    return ProjectSummary(
        project_id=project_id,
        project_name=name,
        client_name="Acme Corp",
        client_id=900,
        total_hours=average * total_entries,
        total_entries=total_entries,
        average_entry_hours=average,
    )


# ─────────────────────────────────────────────────────────────────────────────
# History Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def raw_history() -> list[dict[str, Any]]:
    """Three projects over three dates, as BigTime returns them."""
    return [
        make_raw(1, "Acme:Platform", "2024-03-04T00:00:00", 4.0),
        make_raw(2, "Acme:Support", "2024-03-04T00:00:00", 2.0),
        make_raw(1, "Acme:Platform", "2024-03-05T00:00:00", 6.0),
        make_raw(3, "Verys LLC:Vacation", "2024-03-06T00:00:00", 8.0, client="Verys LLC", client_id=1),
        make_raw(1, "Acme:Platform", "2024-03-06T00:00:00", 2.0),
    ]


@pytest.fixture
def history_entries(raw_history) -> list[TimeEntry]:
    return [TimeEntry.from_bigtime(raw) for raw in raw_history]


# ─────────────────────────────────────────────────────────────────────────────
# Randomness / Timing Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def rng():
    import random

    return random.Random(1234)


class SleepRecorder:
    """Stands in for asyncio.sleep; records requested delays."""

    def __init__(self, events: list | None = None):
        self.delays: list[float] = []
        self.events = events if events is not None else []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        self.events.append(("sleep", seconds))


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


# ─────────────────────────────────────────────────────────────────────────────
# Fake BigTime Client
# ─────────────────────────────────────────────────────────────────────────────


class FakeBigTimeClient:
    """
    In-memory stand-in for BigTimeClient.

    The first range call is answered with ``history``, every later one with
    ``preexisting``. ``fail_on_create`` is the 1-based create call that fails.
    """

    def __init__(
        self,
        history: list[dict[str, Any]],
        preexisting: list[dict[str, Any]] | None = None,
        fail_history: bool = False,
        fail_preexisting: bool = False,
        fail_on_create: int | None = None,
    ):
        self.history = history
        self.preexisting = preexisting or []
        self.fail_history = fail_history
        self.fail_preexisting = fail_preexisting
        self.fail_on_create = fail_on_create

        self.has_session = False
        self.range_calls: list[tuple[date, date | None]] = []
        self.created: list[tuple[TimeEntry, int]] = []
        self.create_attempts = 0

    async def create_session(self) -> dict[str, Any]:
        self.has_session = True
        return {"token": "t", "firm": "f", "staffsid": 7}

    async def get_time_sheet_range(self, start: date, end: date | None = None) -> list[dict[str, Any]]:
        self.range_calls.append((start, end))
        if len(self.range_calls) == 1:
            if self.fail_history:
                raise BigTimeAPIError("history down", status_code=503)
            return self.history
        if self.fail_preexisting:
            raise BigTimeAPIError("window down", status_code=503)
        return self.preexisting

    async def create_time_entry(self, entry: TimeEntry, budget_category_id: int) -> dict[str, Any]:
        self.create_attempts += 1
        if self.fail_on_create is not None and self.create_attempts == self.fail_on_create:
            raise BigTimeAPIError("create failed", status_code=500)
        self.created.append((entry, budget_category_id))
        return {"SID": self.create_attempts}
