# src/ghbackup/vcs/protocols.py
"""Version control operations used to isolate and finalize a backup run.

All paths are absolute; implementations map them onto the working tree.
Every operation raises WorkingTreeError on failure.
"""

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class WorkTree(Protocol):
    """Protocol for the local repository a backup is committed to."""

    @property
    def root(self) -> Path: ...

    def current_ref(self) -> str:
        """Checked-out branch name, or the commit id when detached."""
        ...

    def local_modifications(self) -> set[str]:
        """Paths with uncommitted changes, untracked files included."""
        ...

    def stash(self) -> None: ...

    def unstash(self) -> None: ...

    def branch_exists(self, name: str) -> bool: ...

    def checkout(self, ref: str) -> None: ...

    def create_orphan_branch(self, name: str) -> None:
        """Switch to a new history-less branch with an empty index and tree."""
        ...

    def stage(self, path: Path) -> None: ...

    def unstage(self, path: Path) -> None:
        """Remove ``path`` from the index (the file itself is left alone)."""
        ...

    def has_staged_changes(self) -> bool: ...

    def commit(self, message: str) -> None: ...

    def clean_untracked(self) -> None: ...

    def origin_url(self) -> str | None: ...

    def show(self, ref: str, path: str) -> str | None:
        """Content of ``path`` at ``ref``, or None if it does not exist there."""
        ...
