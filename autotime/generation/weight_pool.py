"""
Tool: Project Weight Pool
Purpose: Turn per-project history into a pool where a uniform draw
reproduces the historical project mix

Each eligible project appears once per historical entry, so a project
logged 40 times is four times as likely to be drawn as one logged 10 times.

Usage:
    from autotime.generation.weight_pool import build_weighted_pool

    pool = build_weighted_pool(summary.projects, excluded_names={"Vacation"})
    project = pool.draw(rng)
"""

from __future__ import annotations

import random
from collections.abc import Iterable
from typing import Any

from autotime.errors import EmptyPoolError
from autotime.generation.models import ProjectSummary
from autotime.logging_config import get_logger

logger = get_logger(__name__)


class WeightedPool:
    """Immutable sequence of shared ProjectSummary references."""

    def __init__(self, members: Iterable[ProjectSummary]):
        self._members: tuple[ProjectSummary, ...] = tuple(members)
        if not self._members:
            raise EmptyPoolError("No eligible historical projects to sample from")

    def __len__(self) -> int:
        return len(self._members)

    def __iter__(self):
        return iter(self._members)

    @property
    def members(self) -> tuple[ProjectSummary, ...]:
        return self._members

    def draw(self, rng: random.Random) -> ProjectSummary:
        """Pick one project uniformly from the pool."""
        return self._members[rng.randrange(len(self._members))]

    def weights(self) -> dict[Any, float]:
        """Selection probability per project id."""
        size = len(self._members)
        counts: dict[Any, int] = {}
        for member in self._members:
            counts[member.project_id] = counts.get(member.project_id, 0) + 1
        return {project_id: count / size for project_id, count in counts.items()}


def build_weighted_pool(
    projects: Iterable[ProjectSummary],
    excluded_names: Iterable[str] = (),
) -> WeightedPool:
    """
    Build the frequency-weighted pool.

    Args:
        projects: Per-project summaries from the aggregator
        excluded_names: Project names that must never be drawn

    Raises:
        EmptyPoolError: If every project is excluded
    """
    excluded = set(excluded_names)
    members: list[ProjectSummary] = []
    skipped: list[str] = []

    for project in projects:
        if project.project_name in excluded:
            skipped.append(project.project_name)
            continue
        members.extend([project] * project.total_entries)

    logger.info("weighted_pool_built", size=len(members), excluded=skipped)
    return WeightedPool(members)


__all__ = ["WeightedPool", "build_weighted_pool"]
