# src/ghbackup/core/rate_limit/budget.py
"""Per-run budget of remote accesses."""

from __future__ import annotations

from collections.abc import Callable

from ghbackup.core.logging import get_logger

logger = get_logger(__name__)


class AccessBudget:
    """Remaining remote accesses permitted for the current run.

    The budget is read once from the remote's reported quota and then
    counted down locally. It is never replenished mid-run, even if the
    remote's own window resets while the run is in progress.

    Example:
        budget = AccessBudget.from_quota(remote.remaining_quota)
        if not budget.reserve(2):
            halt()
    """

    def __init__(self, remaining: int) -> None:
        self._remaining = remaining

    @classmethod
    def from_quota(cls, fetch_quota: Callable[[], int]) -> AccessBudget:
        """Initialize from the remote's remaining quota.

        Any failure to obtain the quota yields an empty budget, which makes
        the run halt immediately at its first step.
        """
        try:
            remaining = fetch_quota()
        except Exception as e:
            # Unknown quota means no budget
            logger.error("Failed to get remote rate limit", error=str(e))
            remaining = 0
        return cls(remaining)

    @property
    def remaining(self) -> int:
        return self._remaining

    def reserve(self, cost: int) -> bool:
        """Charge ``cost`` accesses.

        The cost is charged whether or not the caller's action then succeeds.

        Returns:
            True iff the remaining budget is still non-negative
        """
        if cost < 0:
            raise ValueError(f"cost must be non-negative, got {cost}")
        self._remaining -= cost
        return self._remaining >= 0

    def take_one(self) -> bool:
        """Charge a single access only if one is available.

        Used for fetching a backup target itself, before any traversal.
        """
        if self._remaining > 0:
            self._remaining -= 1
            return True
        return False
