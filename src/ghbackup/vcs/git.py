# src/ghbackup/vcs/git.py
"""Git working tree operations over the ``git`` command line."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

from ghbackup.contracts import WorkingTreeError
from ghbackup.core.logging import get_logger

logger = get_logger(__name__)


class GitWorkTree:
    """A local git repository driven through ``git`` subprocesses.

    Example:
        tree = GitWorkTree.open(Path("."))
        branch = tree.current_ref()
    """

    def __init__(self, root: Path) -> None:
        self._root = root

    @classmethod
    def open(cls, path: Path) -> GitWorkTree:
        """Open the repository containing ``path``.

        Raises:
            WorkingTreeError: If git is missing or ``path`` is not in a work tree
        """
        if shutil.which("git") is None:
            raise WorkingTreeError("git executable not found on PATH")
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=str(path),
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            raise WorkingTreeError(
                f"No local git repository found at {path}: {result.stderr.strip()}"
            )
        return cls(Path(result.stdout.strip()).resolve())

    @property
    def root(self) -> Path:
        return self._root

    def _run(self, args: list[str], check: bool = True) -> subprocess.CompletedProcess[str]:
        """Run a git command within the repository root."""
        try:
            result = subprocess.run(
                ["git", *args],
                cwd=str(self._root),
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            raise WorkingTreeError(f"git {' '.join(args)} could not start: {e}") from e
        if check and result.returncode != 0:
            raise WorkingTreeError(f"git {' '.join(args)} failed: {result.stderr.strip()}")
        return result

    def _relative(self, path: Path) -> str:
        try:
            return path.resolve().relative_to(self._root).as_posix()
        except ValueError as e:
            raise WorkingTreeError(f"{path} is outside the repository {self._root}") from e

    def current_ref(self) -> str:
        branch = self._run(["symbolic-ref", "-q", "--short", "HEAD"], check=False)
        if branch.returncode == 0 and branch.stdout.strip():
            return branch.stdout.strip()
        # Detached HEAD
        return self._run(["rev-parse", "--verify", "HEAD"]).stdout.strip()

    def local_modifications(self) -> set[str]:
        paths: set[str] = set()
        for line in self._run(["status", "--porcelain"]).stdout.splitlines():
            if not line:
                continue
            path = line[3:]
            if " -> " in path:
                path = path.split(" -> ", 1)[1]
            paths.add(path.strip())
        return paths

    def stash(self) -> None:
        self._run(["stash", "push", "--include-untracked", "-m", "ghbackup"])

    def unstash(self) -> None:
        self._run(["stash", "pop"])

    def branch_exists(self, name: str) -> bool:
        result = self._run(
            ["show-ref", "--verify", "--quiet", f"refs/heads/{name}"], check=False
        )
        return result.returncode == 0

    def checkout(self, ref: str) -> None:
        self._run(["checkout", "-q", ref])

    def create_orphan_branch(self, name: str) -> None:
        self._run(["checkout", "-q", "--orphan", name])
        # Nothing is tracked on the new branch; its first commit is the backup
        self._run(["rm", "-r", "-q", "--cached", "--ignore-unmatch", "."])
        self.clean_untracked()

    def stage(self, path: Path) -> None:
        self._run(["add", "--", self._relative(path)])

    def unstage(self, path: Path) -> None:
        self._run(["rm", "-q", "--cached", "--ignore-unmatch", "--", self._relative(path)])

    def has_staged_changes(self) -> bool:
        for line in self._run(["status", "--porcelain"]).stdout.splitlines():
            if line and line[0] not in (" ", "?"):
                return True
        return False

    def commit(self, message: str) -> None:
        self._run(["commit", "-q", "-m", message])

    def clean_untracked(self) -> None:
        self._run(["clean", "-f", "-d", "-q"])

    def origin_url(self) -> str | None:
        result = self._run(["config", "--get", "remote.origin.url"], check=False)
        url = result.stdout.strip()
        return url or None

    def show(self, ref: str, path: str) -> str | None:
        result = self._run(["show", f"{ref}:{path}"], check=False)
        if result.returncode != 0:
            return None
        return result.stdout
