"""Status codes and decisions used across subsystem boundaries."""

from enum import Enum


class Admission(Enum):
    """Decision returned by the resume marker store for a traversal step.

    NOT a (str, Enum): admissions are derived on every run and never persisted.

    Values:
        SKIP: A marker is pending and this step is unrelated to it, so the
            step was completed by an earlier run.
        RESUME_HERE: This step is the pending marker, or an ancestor of it.
        NORMAL: No marker is pending; run the step as in a fresh backup.
    """

    SKIP = "skip"
    RESUME_HERE = "resume_here"
    NORMAL = "normal"


class RunOutcome(str, Enum):
    """How a finalized backup run ended.

    Uses (str, Enum) because the value is written into the commit message.
    """

    COMPLETE = "complete"
    INCREMENTAL = "incremental"
