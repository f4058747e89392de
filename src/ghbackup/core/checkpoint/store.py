# src/ghbackup/core/checkpoint/store.py
"""Durable single-slot storage for the resume marker.

The marker names the step a run was about to execute (or was executing) when
it stopped. It is written before every budget-consuming step of a fresh run,
so it is never behind the true progress point; at worst it names a step that
was attempted but not confirmed, which the next run replays.

Lifecycle:
1. load() at the start of a run; a missing or empty file means no marker
2. query() before each step; matching the pending marker ends resume mode
3. set() before risky work while not resuming
4. clear() once a whole traversal completes
"""

from __future__ import annotations

import os
from pathlib import Path

from ghbackup.contracts import Admission
from ghbackup.core.checkpoint.ids import CheckpointID
from ghbackup.core.logging import get_logger

logger = get_logger(__name__)


class ResumeMarkerStore:
    """Reads, gates against and durably rewrites the resume marker file.

    Two pieces of state are tracked:

    - the *pending* marker: loaded from disk and not yet reached by the
      current traversal. While it is set the store is in resume mode.
    - the *persisted* marker: what the file currently holds.

    Reaching the pending marker only ends resume mode. The file keeps naming
    that step until the next set() overwrites it, so a crash while the step
    is replayed resumes at the same step again.

    Write and removal failures never raise. They are logged as warnings and
    collected in ``failures`` for the run report.
    """

    def __init__(self, path: Path) -> None:
        """Initialize the store.

        Args:
            path: Location of the single-line marker file
        """
        self._path = path
        self._pending: CheckpointID | None = None
        self._persisted: CheckpointID | None = None
        self.failures: list[str] = []

    @property
    def path(self) -> Path:
        return self._path

    @property
    def pending(self) -> CheckpointID | None:
        """Marker still to be reached by this traversal, if resuming."""
        return self._pending

    @property
    def persisted(self) -> CheckpointID | None:
        """Marker currently held on disk, as far as this store knows."""
        return self._persisted

    @property
    def resuming(self) -> bool:
        return self._pending is not None

    def load(self) -> CheckpointID | None:
        """Read the persisted marker.

        Returns:
            The marker, or None when the file is missing or empty
        """
        marker: CheckpointID | None = None
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            text = ""
        except OSError as e:
            logger.warning(
                "Could not read resume marker, running a full backup",
                path=str(self._path),
                error=str(e),
            )
            text = ""

        first_line = text.splitlines()[0] if text.strip() else ""
        if first_line.strip():
            try:
                parsed = CheckpointID.parse(first_line)
            except ValueError as e:
                logger.warning(
                    "Ignoring malformed resume marker, running a full backup",
                    path=str(self._path),
                    error=str(e),
                )
            else:
                marker = None if parsed.is_root else parsed

        self._pending = marker
        self._persisted = marker
        if marker is not None:
            logger.info("Resuming incremental backup", marker=str(marker))
        return marker

    def query(self, checkpoint: CheckpointID) -> Admission:
        """Decide how the traversal should treat ``checkpoint``.

        Returns:
            NORMAL when not resuming; RESUME_HERE when ``checkpoint`` is the
            pending marker (which ends resume mode) or one of its ancestors;
            SKIP for any other step while resuming.
        """
        if self._pending is None:
            return Admission.NORMAL

        if checkpoint == self._pending:
            logger.info("Reached resume point", checkpoint=str(checkpoint))
            self._pending = None
            return Admission.RESUME_HERE

        if checkpoint.is_ancestor_of(self._pending):
            return Admission.RESUME_HERE

        return Admission.SKIP

    def resumes_within(self, *checkpoints: CheckpointID) -> bool:
        """True iff the pending marker is one of ``checkpoints`` or below one.

        Does not change resume state.
        """
        if self._pending is None:
            return False
        return any(cp.contains(self._pending) for cp in checkpoints)

    def release(self) -> None:
        """Leave resume mode without reaching the pending marker.

        Used when the step the marker names no longer exists remotely (for
        example an issue that changed state since the last run). The file is
        left alone.
        """
        if self._pending is not None:
            logger.warning("Resume point no longer exists, continuing", marker=str(self._pending))
            self._pending = None

    def set(self, checkpoint: CheckpointID) -> None:
        """Durably overwrite the marker slot with ``checkpoint``.

        The content is written to a temporary file, flushed and fsynced, then
        atomically moved into place, so the file always holds either the old
        or the new marker.
        """
        temp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with temp_path.open("w", encoding="utf-8") as handle:
                handle.write(f"{checkpoint}\n")
                handle.flush()
                os.fsync(handle.fileno())
            temp_path.replace(self._path)
        except OSError as e:
            message = (
                f"Failed to write resume marker {checkpoint}: {e}. "
                "An interrupted run may not resume at the right point."
            )
            logger.warning(
                "Failed to write resume marker",
                checkpoint=str(checkpoint),
                path=str(self._path),
                error=str(e),
            )
            self.failures.append(message)
            return
        self._persisted = checkpoint

    def record_halt(self, checkpoint: CheckpointID) -> None:
        """Make ``checkpoint`` the resume point of a halted run.

        A pending marker below ``checkpoint`` is more precise and stays.
        """
        if self._pending is not None and checkpoint.is_ancestor_of(self._pending):
            return
        if self._persisted != checkpoint:
            self.set(checkpoint)

    def clear(self) -> None:
        """Remove the persisted marker and leave resume mode."""
        self._pending = None
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(
                "Failed to remove resume marker",
                path=str(self._path),
                error=str(e),
            )
            self.failures.append(f"Failed to remove resume marker {self._path}: {e}")
            return
        self._persisted = None
