"""Checkpoint subsystem for interruption-safe backups.

Provides:
- CheckpointID: Hierarchical identity of one traversal step
- ResumeMarkerStore: Durable single-slot resume marker
- points: The fixed checkpoint vocabulary for GitHub backups
"""

from ghbackup.core.checkpoint import points
from ghbackup.core.checkpoint.ids import ROOT, CheckpointID
from ghbackup.core.checkpoint.store import ResumeMarkerStore

__all__ = ["ROOT", "CheckpointID", "ResumeMarkerStore", "points"]
