# src/ghbackup/core/checkpoint/points.py
"""Fixed checkpoint vocabulary for GitHub backups.

Every budget-consuming step of a backup has an identifier built here, so two
runs of the same traversal produce identical identifier sequences. Nested
steps are built from their parent's identifier, which keeps each parent a
prefix of its children.
"""

from ghbackup.core.checkpoint.ids import ROOT, CheckpointID

OPEN = "open"
CLOSED = "closed"
STATES = (OPEN, CLOSED)


# -- User sections --


def user_followers(base: CheckpointID = ROOT) -> CheckpointID:
    """User info plus followers (the first section of a user file)."""
    return base.child("followers")


def user_follows(base: CheckpointID = ROOT) -> CheckpointID:
    return base.child("follows")


def user_orgs(base: CheckpointID = ROOT) -> CheckpointID:
    return base.child("orgs")


# -- Repository sections --


def repo_owner() -> CheckpointID:
    """Owner of a repository target; the base for the owner's user sections."""
    return ROOT.child("owner")


def repo_collaborators() -> CheckpointID:
    """Repository info file, including its collaborators."""
    return ROOT.child("collaborators")


def issues(state: str) -> CheckpointID:
    return ROOT.child("issues", state)


def issue(state: str, number: int) -> CheckpointID:
    """One issue and its comments."""
    return issues(state).child(number)


def pulls(state: str) -> CheckpointID:
    return ROOT.child("pulls", state)


def pull(state: str, number: int) -> CheckpointID:
    """Structural grouping for one pull request's sections."""
    return pulls(state).child(number)


def pull_merged(state: str, number: int) -> CheckpointID:
    """Pull request body plus merge status."""
    return pull(state, number).child("merged")


def pull_comments(state: str, number: int) -> CheckpointID:
    return pull(state, number).child("comments")


def hooks() -> CheckpointID:
    return ROOT.child("hooks")


def teams() -> CheckpointID:
    return ROOT.child("teams")


def team_members(team_id: int) -> CheckpointID:
    return teams().child(team_id)


def commit_comments() -> CheckpointID:
    return ROOT.child("commit-comments")


def milestones(state: str) -> CheckpointID:
    return ROOT.child("milestones", state)
