"""Exception hierarchy for ghbackup.

Error classes map onto the handling seams of a backup run:

- RemoteError: a single remote access failed. The engine logs it, records a
  diagnostic and carries on with the next step.
- BudgetExhaustedError: the access budget ran out. Raised and caught inside
  the traversal orchestrator to halt the whole walk.
- WorkingTreeError: the local repository could not be isolated or restored.
  Fatal to the run.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ghbackup.core.checkpoint.ids import CheckpointID


class GhBackupError(Exception):
    """Base class for all ghbackup errors."""


class RemoteError(GhBackupError):
    """A request to the remote data source failed."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RemoteNotFoundError(RemoteError):
    """The requested remote entity does not exist (HTTP 404)."""


class WorkingTreeError(GhBackupError):
    """A version control operation needed to isolate or restore the tree failed."""


class BudgetExhaustedError(GhBackupError):
    """The access budget went negative while reserving a step's cost."""

    def __init__(self, checkpoint: CheckpointID) -> None:
        super().__init__(f"Access budget exhausted at {checkpoint}")
        self.checkpoint = checkpoint
