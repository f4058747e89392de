"""Backup engine: plan, traversal, finalization and target resolution."""

from ghbackup.engine.artifacts import ArtifactWriter
from ghbackup.engine.context import RunContext
from ghbackup.engine.finalizer import RunFinalizer, branch_name, commit_message
from ghbackup.engine.orchestrator import TraversalNode, TraversalOrchestrator
from ghbackup.engine.plan import BackupPlan
from ghbackup.engine.runner import (
    BackupRunner,
    BackupTarget,
    parse_github_remote,
    resolve_targets,
)

__all__ = [
    "ArtifactWriter",
    "BackupPlan",
    "BackupRunner",
    "BackupTarget",
    "RunContext",
    "RunFinalizer",
    "TraversalNode",
    "TraversalOrchestrator",
    "branch_name",
    "commit_message",
    "parse_github_remote",
    "resolve_targets",
]
