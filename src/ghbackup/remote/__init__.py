"""Remote data source: protocol, record models and the GitHub client."""

from ghbackup.remote.github import GitHubClient
from ghbackup.remote.models import (
    Comment,
    CommitComment,
    Hook,
    Issue,
    Label,
    Milestone,
    Organization,
    PullRequest,
    Repository,
    Team,
    User,
)
from ghbackup.remote.protocols import RemoteSource

__all__ = [
    "Comment",
    "CommitComment",
    "GitHubClient",
    "Hook",
    "Issue",
    "Label",
    "Milestone",
    "Organization",
    "PullRequest",
    "RemoteSource",
    "Repository",
    "Team",
    "User",
]
