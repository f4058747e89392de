# src/ghbackup/core/rate_limit/pacer.py
"""Request pacing wrapper around pyrate-limiter."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pyrate_limiter import Duration, InMemoryBucket, Limiter, Rate

if TYPE_CHECKING:
    from ghbackup.core.config import RequestPacingSettings


class RequestPacer:
    """Spaces out requests to a remote API.

    Pacing is independent of the per-run AccessBudget: it only delays
    requests, it never refuses or counts them.

    Example:
        pacer = RequestPacer("github", requests_per_second=10)

        pacer.acquire()
        client.get(url)
    """

    def __init__(
        self,
        name: str,
        requests_per_second: int,
        requests_per_minute: int | None = None,
    ) -> None:
        """Initialize pacer.

        Args:
            name: Identifier for this pacer (used as bucket key)
            requests_per_second: Maximum requests allowed per second
            requests_per_minute: Optional maximum requests per minute
        """
        self.name = name

        # One limiter per interval: pyrate-limiter can skip checking the longer
        # interval while the shorter one still has room.
        self._limiters: list[Limiter] = [
            Limiter(
                InMemoryBucket([Rate(requests_per_second, Duration.SECOND)]),
                max_delay=Duration.MINUTE,
                raise_when_fail=True,
            )
        ]
        if requests_per_minute is not None:
            self._limiters.append(
                Limiter(
                    InMemoryBucket([Rate(requests_per_minute, Duration.MINUTE)]),
                    max_delay=Duration.MINUTE,
                    raise_when_fail=True,
                )
            )

    def acquire(self, weight: int = 1) -> None:
        """Wait until ``weight`` requests may be sent."""
        for limiter in self._limiters:
            limiter.try_acquire(self.name, weight=weight)


class NoOpPacer:
    """Pacer used when pacing is disabled."""

    def acquire(self, weight: int = 1) -> None:
        """No-op acquire (always succeeds instantly)."""


def build_pacer(settings: RequestPacingSettings, name: str = "github") -> RequestPacer | NoOpPacer:
    """Create the pacer described by ``settings``."""
    if not settings.enabled:
        return NoOpPacer()
    return RequestPacer(
        name,
        requests_per_second=settings.requests_per_second,
        requests_per_minute=settings.requests_per_minute,
    )
