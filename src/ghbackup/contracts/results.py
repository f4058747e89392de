"""Operation outcomes and results.

These types answer: "What did an operation produce?"
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from ghbackup.contracts.enums import RunOutcome

if TYPE_CHECKING:
    from ghbackup.core.checkpoint.ids import CheckpointID

T = TypeVar("T")


@dataclass(frozen=True)
class Unavailable:
    """Marker for an optional remote attribute that could not be fetched."""

    reason: str

    def __str__(self) -> str:
        return "<unavailable>"


@dataclass(frozen=True)
class Fetched(Generic[T]):
    """Either a fetched value or an explicit Unavailable marker.

    Use the factory methods to create instances.
    """

    value: T | None
    unavailable: Unavailable | None = None

    @classmethod
    def of(cls, value: T) -> Fetched[T]:
        return cls(value=value)

    @classmethod
    def missing(cls, reason: str) -> Fetched[T]:
        return cls(value=None, unavailable=Unavailable(reason))

    @property
    def ok(self) -> bool:
        return self.unavailable is None

    def render(self) -> str:
        """Text form for artifacts: the value, or ``<unavailable>``."""
        if self.unavailable is not None:
            return str(self.unavailable)
        return str(self.value)


@dataclass
class TraversalResult:
    """Result of walking one backup target tree."""

    completed: bool
    halted_at: CheckpointID | None = None
    executed: int = 0
    skipped: int = 0
    budget_remaining: int = 0


@dataclass
class RunReport:
    """Result of one finalized backup run.

    ``success`` is False when any non-fatal error was recorded. The
    diagnostics list holds one human-readable line per such error.
    ``restored`` is False when the backup branch was left checked out.
    """

    target: str
    outcome: RunOutcome
    branch: str
    committed: bool
    traversal: TraversalResult | None = None
    diagnostics: list[str] = field(default_factory=list)
    restored: bool = True

    @property
    def success(self) -> bool:
        return not self.diagnostics
