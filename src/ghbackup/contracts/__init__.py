"""Shared contracts for cross-boundary data types.

Enums, exceptions and result dataclasses that cross subsystem boundaries
(engine <-> remote <-> vcs <-> cli) live here.

Import pattern:
    from ghbackup.contracts import Admission, RemoteError, TraversalResult
"""

from ghbackup.contracts.enums import Admission, RunOutcome
from ghbackup.contracts.errors import (
    BudgetExhaustedError,
    GhBackupError,
    RemoteError,
    RemoteNotFoundError,
    WorkingTreeError,
)
from ghbackup.contracts.results import (
    Fetched,
    RunReport,
    TraversalResult,
    Unavailable,
)

__all__ = [
    # enums
    "Admission",
    "RunOutcome",
    # errors
    "BudgetExhaustedError",
    "GhBackupError",
    "RemoteError",
    "RemoteNotFoundError",
    "WorkingTreeError",
    # results
    "Fetched",
    "RunReport",
    "TraversalResult",
    "Unavailable",
]
