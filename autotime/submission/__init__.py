"""Submission - serialized, rate-limited, fail-fast delivery of entries to BigTime."""

from autotime.submission.scheduler import SubmissionReport, SubmissionScheduler, flatten_schedules

__all__ = ["SubmissionReport", "SubmissionScheduler", "flatten_schedules"]
