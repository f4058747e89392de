# src/ghbackup/engine/artifacts.py
"""Backup artifact files on the checked-out backup branch.

Every file is staged as soon as it is written, so whatever a run manages to
write before it halts is part of that run's commit.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from ghbackup.contracts import WorkingTreeError
from ghbackup.core.logging import get_logger
from ghbackup.vcs import WorkTree

logger = get_logger(__name__)


class ArtifactWriter:
    """Writes line-oriented text artifacts below the repository root.

    Write and staging failures do not raise. They are logged and collected
    in ``failures`` so the traversal carries on with the next step.
    """

    def __init__(self, worktree: WorkTree) -> None:
        self._worktree = worktree
        self._root = worktree.root
        self.failures: list[str] = []

    @property
    def root(self) -> Path:
        return self._root

    def write(self, relative_path: str, lines: Iterable[str], append: bool = False) -> Path:
        """Write ``lines`` to ``relative_path`` and stage the file.

        Args:
            relative_path: POSIX path relative to the repository root
            lines: Lines to write, without trailing newlines
            append: Add to an existing file instead of replacing it

        Returns:
            Absolute path of the artifact
        """
        path = self._root / relative_path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("a" if append else "w", encoding="utf-8") as handle:
                for line in lines:
                    handle.write(f"{line}\n")
        except OSError as e:
            logger.warning("Failed to write artifact", path=relative_path, error=str(e))
            self.failures.append(f"Failed to write {relative_path}: {e}")
            return path

        try:
            self._worktree.stage(path)
        except WorkingTreeError as e:
            logger.warning("Failed to stage artifact", path=relative_path, error=str(e))
            self.failures.append(f"Failed to stage {relative_path}: {e}")
            return path

        logger.debug("Wrote artifact", path=relative_path, append=append)
        return path
