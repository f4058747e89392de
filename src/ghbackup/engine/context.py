# src/ghbackup/engine/context.py
"""Run context: the state shared by every step of one backup run.

The RunContext is created by the finalizer once the backup branch is checked
out, and passed by reference to the plan and the orchestrator. Nothing in the
engine keeps run state anywhere else.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeVar

from ghbackup.contracts import Fetched, RemoteError
from ghbackup.core.logging import get_logger

if TYPE_CHECKING:
    from ghbackup.core.checkpoint import ResumeMarkerStore
    from ghbackup.core.rate_limit import AccessBudget
    from ghbackup.engine.artifacts import ArtifactWriter
    from ghbackup.remote import RemoteSource

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class RunContext:
    """Everything a traversal step may touch.

    Attributes:
        remote: Source of the data being backed up
        budget: Remote accesses left for this run
        markers: Resume marker gate for this run's branch
        artifacts: Writer for backup files on the branch
        diagnostics: One line per non-fatal error, in the order they occurred
    """

    remote: RemoteSource
    budget: AccessBudget
    markers: ResumeMarkerStore
    artifacts: ArtifactWriter
    diagnostics: list[str] = field(default_factory=list)

    def record_error(self, message: str, **context: Any) -> None:
        """Log a non-fatal error and keep it for the run report."""
        logger.warning(message, **context)
        detail = ", ".join(f"{key}={value}" for key, value in context.items())
        self.diagnostics.append(f"{message} ({detail})" if detail else message)

    def optional(self, what: str, fetch: Callable[[], T]) -> Fetched[T]:
        """Fetch an optional attribute, degrading to Unavailable on failure.

        Args:
            what: Human-readable name of the attribute, used in diagnostics
            fetch: Zero-argument callable performing the remote access

        Returns:
            Fetched holding the value, or an Unavailable marker if the remote
            access raised RemoteError
        """
        try:
            return Fetched.of(fetch())
        except RemoteError as e:
            self.record_error(f"Failed to get {what}", error=str(e))
            return Fetched.missing(str(e))
