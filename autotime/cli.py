#!/usr/bin/env python3
"""
autotime Command Line Interface

Main entry point for the `autotime` command.

Usage:
    autotime run                 # Generate, save and submit entries
    autotime run --dry-run       # Generate and save only
    autotime run --days 3 --seed 42
    autotime stats               # Show the learned project mix as JSON
    autotime --version           # Show version
"""

import argparse
import asyncio
import json
import random
import sys
from pathlib import Path

from dotenv import load_dotenv

from autotime import __version__
from autotime.errors import AutotimeError, ConfigurationError
from autotime.logging_config import get_logger, setup_logging

logger = get_logger("autotime.cli")


def cmd_version(args):
    """Handle --version."""
    print(f"autotime {__version__}")


def _load_config(args):
    from pydantic import ValidationError

    from autotime.config_models import GenerationConfig, load_config

    config = load_config(Path(args.config) if args.config else None)
    days = getattr(args, "days", None)
    if days is not None:
        try:
            config.generation = GenerationConfig.model_validate(
                {**config.generation.model_dump(), "window_days": days}
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid --days {days}: {e}") from e
    return config


def _client_for(config):
    from autotime.bigtime.client import BigTimeClient

    return BigTimeClient.from_env(
        base_url=config.bigtime.base_url,
        timeout=config.bigtime.timeout_seconds,
    )


def cmd_run(args):
    """Handle run subcommand."""
    from autotime.runner import run_autofill

    config = _load_config(args)
    rng = random.Random(args.seed) if args.seed is not None else None
    results_dir = Path(args.results_dir) if args.results_dir else None

    async def _run():
        async with _client_for(config) as client:
            return await run_autofill(
                config,
                client,
                rng=rng,
                submit=not args.dry_run,
                results_dir=results_dir,
            )

    result = asyncio.run(_run())

    for schedule in result.schedules:
        print(
            f"  {schedule.date.isoformat()}  "
            f"{schedule.existing_hours:5.2f}h existing  "
            f"+{schedule.synthesized_hours:5.2f}h in {len(schedule.entries)} entries"
        )
    print(f"\nSaved results to {result.results_path}")
    if result.dry_run:
        print("Dry run: nothing was submitted.")
    else:
        print(f"Done. Submitted {len(result.report.submitted)} entries.")
    return 0


def cmd_stats(args):
    """Handle stats subcommand."""
    from autotime.runner import build_history_stats

    config = _load_config(args)

    async def _run():
        async with _client_for(config) as client:
            return await build_history_stats(config, client)

    summary = asyncio.run(_run())
    print(json.dumps(summary.to_dict(), indent=2, default=str))
    return 0


def main():
    """Main CLI entry point."""
    load_dotenv()
    setup_logging()

    parser = argparse.ArgumentParser(
        prog="autotime",
        description="autotime - fill recent BigTime days from your own history",
    )
    parser.add_argument(
        "--version", "-V", action="store_true", help="Show version and exit"
    )
    parser.add_argument(
        "--config", default=None, help="Path to config YAML (default: args/autotime.yaml)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Run subcommand
    run_parser = subparsers.add_parser(
        "run", help="Generate entries for the recent window and submit them"
    )
    run_parser.add_argument(
        "--dry-run", action="store_true", help="Generate and save without submitting"
    )
    run_parser.add_argument(
        "--days", type=int, default=None, help="Override the window length in days"
    )
    run_parser.add_argument(
        "--seed", type=int, default=None, help="Seed the random generator for a reproducible schedule"
    )
    run_parser.add_argument(
        "--results-dir", default=None, help="Directory for the results JSON (default: results/)"
    )
    run_parser.set_defaults(func=cmd_run)

    # Stats subcommand
    stats_parser = subparsers.add_parser(
        "stats", help="Show the historical project mix as JSON"
    )
    stats_parser.set_defaults(func=cmd_stats)

    args = parser.parse_args()

    # Handle --version at top level
    if args.version:
        cmd_version(args)
        return

    # If no command given, show help
    if not args.command:
        parser.print_help()
        return

    # Execute command; every failure ends the run here
    try:
        result = args.func(args)
    except AutotimeError as e:
        logger.error("run_failed", error_type=type(e).__name__, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        result = 1

    # Commands may return an exit code
    if isinstance(result, int) and result != 0:
        sys.exit(result)


if __name__ == "__main__":
    main()
