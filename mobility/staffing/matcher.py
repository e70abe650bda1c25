"""Filter chain for qualifying candidates against a project demand.

Filter order:
  1. RoleFilter           - exact role match, case-insensitive
  2. AvailabilityFilter   - drop candidates marked unavailable
  3. DeduplicationFilter  - in-memory within run, by candidate id
"""

import logging
from collections.abc import Callable

from mobility.core.schemas import Candidate

logger = logging.getLogger(__name__)

# A filter is a callable that takes candidates and returns a subset.
Filter = Callable[[list[Candidate]], list[Candidate]]


class RoleFilter:
    """Keep only candidates whose role equals the demanded role (case-insensitive)."""

    def __init__(self, role: str) -> None:
        self._role = role.strip().lower()

    def __call__(self, candidates: list[Candidate]) -> list[Candidate]:
        result = [c for c in candidates if c.role.strip().lower() == self._role]
        excluded = len(candidates) - len(result)
        if excluded:
            logger.debug("RoleFilter: removed %d candidates", excluded)
        return result


class AvailabilityFilter:
    """Remove candidates who are not available for deployment."""

    def __call__(self, candidates: list[Candidate]) -> list[Candidate]:
        result = [c for c in candidates if c.available]
        excluded = len(candidates) - len(result)
        if excluded:
            logger.debug("AvailabilityFilter: removed %d candidates", excluded)
        return result


class DeduplicationFilter:
    """Remove duplicates by candidate id, keeping the first occurrence.

    Stateful: tracks seen IDs across calls within the same filter instance.
    """

    def __init__(self) -> None:
        self._seen: set[str] = set()

    def __call__(self, candidates: list[Candidate]) -> list[Candidate]:
        result: list[Candidate] = []
        for c in candidates:
            if c.id not in self._seen:
                self._seen.add(c.id)
                result.append(c)
        deduped = len(candidates) - len(result)
        if deduped:
            logger.debug("DeduplicationFilter: removed %d duplicates", deduped)
        return result


def build_filters(role: str) -> list[Filter]:
    """Default chain for a demanded role."""
    return [RoleFilter(role), AvailabilityFilter(), DeduplicationFilter()]


def run_filter_chain(
    candidates: list[Candidate],
    filters: list[Filter],
) -> list[Candidate]:
    """Apply filters in order, returning the surviving candidates."""
    result = candidates
    for f in filters:
        result = f(result)
    return result
