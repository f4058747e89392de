# src/ghbackup/engine/runner.py
"""Backup runner: resolves targets and runs one finalized backup per target."""

from __future__ import annotations

import re
from dataclasses import dataclass

from ghbackup.contracts import (
    GhBackupError,
    RemoteError,
    RunOutcome,
    RunReport,
)
from ghbackup.core.config import BackupSettings
from ghbackup.core.logging import get_logger
from ghbackup.core.rate_limit import AccessBudget
from ghbackup.engine.finalizer import RunFinalizer, branch_name
from ghbackup.remote import RemoteSource
from ghbackup.vcs import WorkTree

logger = get_logger(__name__)

# https://github.com/o/r(.git), git@github.com:o/r(.git), ssh://git@github.com/o/r(.git)
_GITHUB_REMOTE = re.compile(
    r"^(?:[a-z+]+://)?(?:[^@/]+@)?github\.com[:/](?P<path>[^/]+/[^/]+?)(?:\.git)?/?$"
)


def parse_github_remote(url: str) -> str:
    """Extract ``owner/name`` from a GitHub remote URL.

    Raises:
        GhBackupError: If the URL does not point at github.com
    """
    match = _GITHUB_REMOTE.match(url.strip())
    if match is None:
        raise GhBackupError(f"Origin remote is not a GitHub repository: {url}")
    return match.group("path")


@dataclass(frozen=True)
class BackupTarget:
    """A user login or an ``owner/name`` repository to back up."""

    kind: str
    name: str

    @classmethod
    def user(cls, login: str) -> BackupTarget:
        return cls(kind="user", name=login)

    @classmethod
    def repository(cls, full_name: str) -> BackupTarget:
        return cls(kind="repository", name=full_name)


def resolve_targets(settings: BackupSettings, worktree: WorkTree) -> list[BackupTarget]:
    """Targets for this invocation, in backup order.

    A configured user comes first, then a configured repository. With
    neither, the repository behind the local origin remote is the target.

    Raises:
        GhBackupError: If the origin remote is needed but missing or not on GitHub
    """
    targets: list[BackupTarget] = []
    if settings.github.user:
        targets.append(BackupTarget.user(settings.github.user))
    if settings.github.repository:
        targets.append(BackupTarget.repository(settings.github.repository))
    elif not targets:
        origin = worktree.origin_url()
        if origin is None:
            raise GhBackupError(
                "No user or repository configured and the local repository has no origin remote"
            )
        targets.append(BackupTarget.repository(parse_github_remote(origin)))
    return targets


class BackupRunner:
    """Backs up every configured target into the local repository.

    Targets come from resolve_targets(). All of them share one access
    budget, read from the remote once per invocation.

    Example:
        with GitHubClient(settings.github) as remote:
            reports = BackupRunner(settings, remote, GitWorkTree.open(path)).run()
    """

    def __init__(self, settings: BackupSettings, remote: RemoteSource, worktree: WorkTree) -> None:
        self._settings = settings
        self._remote = remote
        self._worktree = worktree
        self._finalizer = RunFinalizer(
            worktree,
            branch_prefix=settings.branch_prefix,
            marker_file=settings.marker_file,
            clean=settings.clean,
        )

    def run(self) -> list[RunReport]:
        """Back up all targets.

        Returns:
            One RunReport per target

        Raises:
            GhBackupError: If the targets cannot be resolved
            WorkingTreeError: If a run cannot isolate or restore the working tree
        """
        targets = resolve_targets(self._settings, self._worktree)
        budget = AccessBudget.from_quota(self._remote.remaining_quota)
        logger.info("Remaining accesses before backup", remaining=budget.remaining)

        reports = [self._run_target(target, budget) for target in targets]

        logger.info("Remaining accesses after backup", remaining=budget.remaining)
        return reports

    def _run_target(self, target: BackupTarget, budget: AccessBudget) -> RunReport:
        if not budget.take_one():
            message = (
                f"No remote accesses left to fetch {target.kind} {target.name}; "
                "try again once the rate limit has refreshed, or authenticate"
            )
            logger.warning("Skipping backup target", target=target.name, reason="budget")
            return self._failed(target, message)

        try:
            if target.kind == "user":
                user = self._remote.get_user(target.name)
                if user is None:
                    return self._failed(target, f"User not found: {target.name}")
                return self._finalizer.run(
                    target.name, self._remote, budget, lambda plan: plan.for_user(user)
                )

            repo = self._remote.get_repository(target.name)
            if repo is None:
                return self._failed(target, f"Repository not found: {target.name}")
            return self._finalizer.run(
                target.name, self._remote, budget, lambda plan: plan.for_repository(repo)
            )
        except RemoteError as e:
            return self._failed(target, f"Failed to fetch {target.kind} {target.name}: {e}")

    def _failed(self, target: BackupTarget, message: str) -> RunReport:
        logger.error("Backup target not run", target=target.name, error=message)
        return RunReport(
            target=target.name,
            outcome=RunOutcome.INCREMENTAL,
            branch=branch_name(target.name, self._settings.branch_prefix),
            committed=False,
            diagnostics=[message],
        )
