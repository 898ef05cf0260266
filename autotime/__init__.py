"""
autotime - BigTime timesheet autofill

Learns how time is usually spread across projects from the BigTime history
and fills the last few days with a plausible set of entries.

Components:
    generation/: History aggregation, weighted project pool, daily allocation
    submission/: Rate-limited, fail-fast entry submission
    bigtime/:    Async BigTime REST client
    runner.py:   End-to-end run (fetch -> generate -> save -> submit)
    cli.py:      `autotime` command line entry point

Configuration: args/autotime.yaml (overridable through BIGTIME_* env vars)
Results: results/YYYY-MM-DD-<epoch-millis>.json
"""

from pathlib import Path

__version__ = "0.3.0"

# Path constants
PROJECT_ROOT = Path(__file__).parent.parent
ARGS_DIR = PROJECT_ROOT / "args"
CONFIG_PATH = ARGS_DIR / "autotime.yaml"
RESULTS_DIR = PROJECT_ROOT / "results"

__all__ = [
    "__version__",
    "PROJECT_ROOT",
    "ARGS_DIR",
    "CONFIG_PATH",
    "RESULTS_DIR",
]
