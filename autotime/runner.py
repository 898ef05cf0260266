"""
Tool: Autofill Runner
Purpose: Run the whole autofill pipeline against BigTime

Flow:
    1. Create a BigTime session
    2. Fetch history (today - lookback .. today)
    3. Aggregate -> weighted pool -> allocator (config errors surface here)
    4. Fetch what is already logged in the target window
    5. Allocate every day in the window
    6. Save the schedule to results/ (before submitting, so the plan is on
       disk even if submission aborts)
    7. Submit through the rate-limited scheduler (skipped for dry runs)

Each stage hands its output to the next; nothing is shared or mutated
across stages. Failures raise AutotimeError subclasses for the caller to
handle.

Usage:
    from autotime.runner import run_autofill

    async with BigTimeClient.from_env() as client:
        result = await run_autofill(config, client)
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path
from typing import Any

from dateutil.relativedelta import relativedelta

from autotime.bigtime.client import BigTimeClient
from autotime.config_models import AutotimeConfig
from autotime.errors import BigTimeAPIError, UpstreamFetchError
from autotime.generation.aggregator import aggregate_history
from autotime.generation.allocator import DailyAllocator, window_dates
from autotime.generation.models import (
    DaySchedule,
    HistoricalSummary,
    TimeEntry,
    existing_hours_by_date,
)
from autotime.generation.weight_pool import build_weighted_pool
from autotime.logging_config import get_logger, run_context
from autotime.results import save_results
from autotime.submission.scheduler import (
    SleepFn,
    SubmissionReport,
    SubmissionScheduler,
    flatten_schedules,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class AutofillResult:
    """Everything a run produced."""

    history: HistoricalSummary
    schedules: list[DaySchedule]
    results_path: Path
    report: SubmissionReport | None = None

    @property
    def entry_count(self) -> int:
        return sum(len(s.entries) for s in self.schedules)

    @property
    def dry_run(self) -> bool:
        return self.report is None


def history_start(config: AutotimeConfig, today: date) -> date:
    """First day of the learning window."""
    lookback = relativedelta(**{config.history.lookback_unit: config.history.lookback_value})
    return today - lookback


def parse_entries(raw_entries: list[dict[str, Any]], what: str) -> list[TimeEntry]:
    try:
        return [TimeEntry.from_bigtime(raw) for raw in raw_entries]
    except (KeyError, TypeError, ValueError) as e:
        raise UpstreamFetchError(f"Malformed {what} entry from BigTime: {e}") from e


async def fetch_entries(
    client: BigTimeClient,
    start: date,
    end: date | None,
    what: str,
) -> list[TimeEntry]:
    """Fetch and parse a timesheet range; any failure is an UpstreamFetchError."""
    try:
        raw_entries = await client.get_time_sheet_range(start, end)
    except BigTimeAPIError as e:
        raise UpstreamFetchError(f"Error fetching {what}: {e}") from e

    entries = parse_entries(raw_entries, what)
    logger.info(
        "entries_fetched",
        what=what,
        start=start.isoformat(),
        end=end.isoformat() if end else None,
        count=len(entries),
    )
    return entries


async def open_session(client: BigTimeClient) -> None:
    if client.has_session:
        return
    try:
        await client.create_session()
    except BigTimeAPIError as e:
        raise UpstreamFetchError(f"Could not create BigTime session: {e}") from e


async def build_history_stats(
    config: AutotimeConfig,
    client: BigTimeClient,
    today: date | None = None,
) -> HistoricalSummary:
    """Fetch and aggregate history only (the `stats` command)."""
    today = today or date.today()
    await open_session(client)
    history = await fetch_entries(client, history_start(config, today), today, "timesheet range data")
    return aggregate_history(history)


async def run_autofill(
    config: AutotimeConfig,
    client: BigTimeClient,
    *,
    today: date | None = None,
    rng: random.Random | None = None,
    submit: bool = True,
    results_dir: Path | None = None,
    sleep: SleepFn = asyncio.sleep,
) -> AutofillResult:
    """
    Run the autofill end to end.

    Args:
        config: Validated configuration
        client: BigTime client (session is created if needed)
        today: Last day of the window (default: today)
        rng: Random source (seed it for reproducible schedules)
        submit: False for a dry run (generate and save only)
        results_dir: Override config.results.directory
        sleep: Awaitable sleep used between submissions

    Returns:
        AutofillResult

    Raises:
        AutotimeError: Any failure; nothing is partially recovered
    """
    today = today or date.today()
    rng = rng or random.Random()

    with run_context(dry_run=not submit, window_days=config.generation.window_days):
        return await _autofill(config, client, today, rng, submit, results_dir, sleep)


async def _autofill(
    config: AutotimeConfig,
    client: BigTimeClient,
    today: date,
    rng: random.Random,
    submit: bool,
    results_dir: Path | None,
    sleep: SleepFn,
) -> AutofillResult:
    gen = config.generation

    # Fetch history and build the model
    history = await build_history_stats(config, client, today)
    pool = build_weighted_pool(history.projects, gen.excluded_projects)
    allocator = DailyAllocator(
        pool,
        min_daily_hours=gen.min_daily_hours,
        max_daily_hours=gen.max_daily_hours,
        time_increment_minutes=gen.time_increment_minutes,
        max_attempts_per_day=gen.max_attempts_per_day,
        rng=rng,
    )

    # Pre-existing hours for the target window
    dates = window_dates(today, gen.window_days)
    window_start = today - timedelta(days=gen.window_days - 1)
    preexisting = await fetch_entries(client, window_start, today, "pre-existing data")

    schedules = allocator.allocate_window(dates, existing_hours_by_date(preexisting))
    path = save_results(schedules, results_dir or config.results.resolve())

    if not submit:
        logger.info("dry_run_complete", entries=sum(len(s.entries) for s in schedules), path=str(path))
        return AutofillResult(history=history, schedules=schedules, results_path=path)

    budget_category_id = config.bigtime.budget_category_id

    async def submit_entry(entry: TimeEntry) -> Any:
        return await client.create_time_entry(entry, budget_category_id)

    scheduler = SubmissionScheduler(
        submit=submit_entry,
        delay_seconds=config.submission.delay_seconds,
        sleep=sleep,
    )
    report = await scheduler.run(flatten_schedules(schedules))

    return AutofillResult(history=history, schedules=schedules, results_path=path, report=report)


__all__ = [
    "AutofillResult",
    "build_history_stats",
    "fetch_entries",
    "history_start",
    "open_session",
    "parse_entries",
    "run_autofill",
]
