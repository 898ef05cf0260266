"""
Error types for autotime.

Every failure is fatal for a run. The core raises one of these and the CLI
(the only top-level handler) logs it and exits non-zero.
"""

from __future__ import annotations

from typing import Any


class AutotimeError(Exception):
    """Base class for all autotime failures."""


class ConfigurationError(AutotimeError):
    """Raised when configuration is missing or invalid."""


class UnsatisfiableConstraintError(ConfigurationError):
    """Raised when a day cannot be filled inside the configured hours band."""


class UpstreamFetchError(AutotimeError):
    """Raised when history or the pre-existing window cannot be fetched."""


class PreconditionError(AutotimeError):
    """Raised when generation inputs cannot support a run."""


class EmptyHistoryError(PreconditionError):
    """Raised when the historical window contains no entries."""


class EmptyPoolError(PreconditionError):
    """Raised when no historical project is eligible for sampling."""


class BigTimeAPIError(AutotimeError):
    """Raised when a BigTime API call fails."""

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class SubmissionError(AutotimeError):
    """Raised when submitting an entry fails. Aborts the remaining queue."""

    def __init__(self, message: str, entry: Any, index: int, submitted_count: int):
        super().__init__(message)
        self.entry = entry
        self.index = index
        self.submitted_count = submitted_count


__all__ = [
    "AutotimeError",
    "BigTimeAPIError",
    "ConfigurationError",
    "EmptyHistoryError",
    "EmptyPoolError",
    "PreconditionError",
    "SubmissionError",
    "UnsatisfiableConstraintError",
    "UpstreamFetchError",
]
