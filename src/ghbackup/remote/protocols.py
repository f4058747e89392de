# src/ghbackup/remote/protocols.py
"""Capabilities the backup engine needs from a remote data source.

Fetches return None when the entity does not exist. Listings return the
complete, finite list from the start on every call: no server-side cursor is
assumed to survive between runs. Any failed access raises RemoteError.
"""

from typing import Protocol, runtime_checkable

from ghbackup.remote.models import (
    Comment,
    CommitComment,
    Hook,
    Issue,
    Milestone,
    Organization,
    PullRequest,
    Repository,
    Team,
    User,
)


@runtime_checkable
class RemoteSource(Protocol):
    """Protocol for remote data sources (GitHub, or fakes in tests)."""

    def remaining_quota(self) -> int:
        """Remaining API accesses for the current rate limit window."""
        ...

    def get_user(self, login: str) -> User | None: ...

    def get_repository(self, full_name: str) -> Repository | None: ...

    def list_followers(self, login: str) -> list[User]: ...

    def list_following(self, login: str) -> list[User]: ...

    def list_organizations(self, login: str) -> list[Organization]: ...

    def list_collaborators(self, full_name: str) -> list[User]: ...

    def list_issues(self, full_name: str, state: str) -> list[Issue]:
        """Issues in ``state`` (open/closed), excluding pull requests."""
        ...

    def list_issue_comments(self, full_name: str, number: int) -> list[Comment]: ...

    def list_pulls(self, full_name: str, state: str) -> list[PullRequest]: ...

    def is_pull_merged(self, full_name: str, number: int) -> bool: ...

    def list_hooks(self, full_name: str) -> list[Hook]: ...

    def list_teams(self, full_name: str) -> list[Team]: ...

    def list_team_members(self, org: str, team_slug: str) -> list[User]: ...

    def list_commit_comments(self, full_name: str) -> list[CommitComment]: ...

    def list_milestones(self, full_name: str, state: str) -> list[Milestone]: ...
