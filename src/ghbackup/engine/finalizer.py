# src/ghbackup/engine/finalizer.py
"""Run finalizer: isolates one backup run on its own branch.

Lifecycle of a run:
1. Remember the checked-out ref and stash local modifications
2. Switch to the target's backup branch, creating it as an orphan if absent
3. Load the resume marker (or discard it for a full backup)
4. Traverse the target tree
5. Stage the marker if the run halted, drop it if the run completed
6. Commit whatever was staged, tagged complete or incremental
7. Clean untracked leftovers, restore the original ref, pop the stash

Failures in steps 1, 2 and 7 raise WorkingTreeError: the user's own work
is at stake. Everything else is recorded in the run report.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import datetime

from ghbackup.contracts import (
    RunOutcome,
    RunReport,
    TraversalResult,
    WorkingTreeError,
)
from ghbackup.core.checkpoint import ResumeMarkerStore
from ghbackup.core.logging import get_logger
from ghbackup.core.rate_limit import AccessBudget
from ghbackup.engine.artifacts import ArtifactWriter
from ghbackup.engine.context import RunContext
from ghbackup.engine.orchestrator import TraversalNode, TraversalOrchestrator
from ghbackup.engine.plan import BackupPlan
from ghbackup.remote import RemoteSource
from ghbackup.vcs import WorkTree

logger = get_logger(__name__)

COMMIT_TIME_FORMAT = "%Y/%m/%d %H:%M:%S"

_UNSAFE_BRANCH_CHARS = re.compile(r"[^a-z0-9._/-]+")


def branch_name(target: str, prefix: str = "backup-") -> str:
    """Backup branch for a target such as ``octocat`` or ``octocat/hello``."""
    return prefix + _UNSAFE_BRANCH_CHARS.sub("-", target.lower())


def commit_message(outcome: RunOutcome, now: datetime) -> str:
    return f"{now.strftime(COMMIT_TIME_FORMAT)} - {outcome.value}"


class RunFinalizer:
    """Runs one backup target and commits the result to its branch.

    Example:
        finalizer = RunFinalizer(GitWorkTree.open(Path(".")))
        report = finalizer.run("octocat", remote, budget, lambda plan: plan.for_user(user))
    """

    def __init__(
        self,
        worktree: WorkTree,
        *,
        branch_prefix: str = "backup-",
        marker_file: str = "RESUME_FILE",
        clean: bool = False,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize finalizer.

        Args:
            worktree: Local repository the backup is committed to
            branch_prefix: Prefix of per-target backup branches
            marker_file: Name of the resume marker file at the repository root
            clean: Discard any resume marker and run a full backup
            clock: Source of the commit timestamp
        """
        self._worktree = worktree
        self._branch_prefix = branch_prefix
        self._marker_file = marker_file
        self._clean = clean
        self._clock = clock

    def run(
        self,
        target: str,
        remote: RemoteSource,
        budget: AccessBudget,
        build_roots: Callable[[BackupPlan], list[TraversalNode]],
    ) -> RunReport:
        """Back up one target on its branch and restore the working tree.

        Args:
            target: Display name of the target, also used for the branch name
            remote: Remote data source
            budget: Access budget shared by all targets of the invocation
            build_roots: Builds the target's traversal roots from the run's plan

        Returns:
            RunReport for the target

        Raises:
            WorkingTreeError: If the working tree cannot be isolated or restored
        """
        worktree = self._worktree
        branch = branch_name(target, self._branch_prefix)

        original_ref = worktree.current_ref()
        stashed = False
        if worktree.local_modifications():
            logger.info("Stashing local modifications", ref=original_ref)
            worktree.stash()
            stashed = True

        try:
            self._switch_branch(branch)
            report = self._backup(target, branch, remote, budget, build_roots)
        except BaseException:
            self._restore(original_ref, stashed)
            raise

        if not report.restored:
            logger.error(
                "Backup branch left checked out after commit failure",
                branch=branch,
                original_ref=original_ref,
                stashed=stashed,
            )
            report.diagnostics.append(
                f"Left on branch {branch}; return with 'git checkout {original_ref}'"
                + (" and 'git stash pop'" if stashed else "")
            )
            return report

        self._restore(original_ref, stashed)
        return report

    def _switch_branch(self, branch: str) -> None:
        if self._worktree.branch_exists(branch):
            logger.info("Checking out backup branch", branch=branch)
            self._worktree.checkout(branch)
        else:
            logger.info("Creating backup branch", branch=branch)
            self._worktree.create_orphan_branch(branch)

    def _backup(
        self,
        target: str,
        branch: str,
        remote: RemoteSource,
        budget: AccessBudget,
        build_roots: Callable[[BackupPlan], list[TraversalNode]],
    ) -> RunReport:
        worktree = self._worktree
        marker_path = worktree.root / self._marker_file
        markers = ResumeMarkerStore(marker_path)
        if self._clean:
            logger.info("Full backup requested, discarding resume marker")
            markers.clear()
        else:
            markers.load()

        artifacts = ArtifactWriter(worktree)
        context = RunContext(remote=remote, budget=budget, markers=markers, artifacts=artifacts)
        result: TraversalResult = TraversalOrchestrator(context).traverse(
            build_roots(BackupPlan(context))
        )

        diagnostics = context.diagnostics
        if result.completed:
            outcome = RunOutcome.COMPLETE
            markers.clear()
            try:
                worktree.unstage(marker_path)
            except WorkingTreeError as e:
                context.record_error("Failed to drop resume marker from the index", error=str(e))
        else:
            outcome = RunOutcome.INCREMENTAL
            if marker_path.exists():
                try:
                    worktree.stage(marker_path)
                except WorkingTreeError as e:
                    context.record_error("Failed to stage resume marker", error=str(e))

        committed = False
        restored = True
        try:
            if worktree.has_staged_changes():
                message = commit_message(outcome, self._clock())
                worktree.commit(message)
                committed = True
                logger.info("Committed backup", branch=branch, message=message)
            else:
                logger.info("Nothing to commit", branch=branch)
        except WorkingTreeError as e:
            # Staged artifacts stay on the backup branch
            context.record_error("Failed to commit backup", branch=branch, error=str(e))
            restored = False

        if restored:
            try:
                worktree.clean_untracked()
            except WorkingTreeError as e:
                context.record_error("Failed to clean working tree", error=str(e))

        report = RunReport(
            target=target,
            outcome=outcome,
            branch=branch,
            committed=committed,
            traversal=result,
            diagnostics=[*diagnostics, *markers.failures, *artifacts.failures],
            restored=restored,
        )
        logger.info(
            "Backup run finished",
            target=target,
            outcome=outcome.value,
            executed=result.executed,
            skipped=result.skipped,
            remaining=budget.remaining,
            errors=len(report.diagnostics),
        )
        return report

    def _restore(self, original_ref: str, stashed: bool) -> None:
        logger.info("Restoring original ref", ref=original_ref)
        self._worktree.checkout(original_ref)
        if stashed:
            try:
                self._worktree.unstash()
            except WorkingTreeError as e:
                raise WorkingTreeError(
                    f"Restored {original_ref} but could not pop the stash "
                    f"(local changes remain in 'git stash list'): {e}"
                ) from e
