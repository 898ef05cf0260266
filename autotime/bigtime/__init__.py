"""BigTime integration - async REST client for sessions, timesheets and entries."""

from autotime.bigtime.client import BIGTIME_API_BASE, BigTimeClient

__all__ = ["BIGTIME_API_BASE", "BigTimeClient"]
