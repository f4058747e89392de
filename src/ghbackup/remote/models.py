# src/ghbackup/remote/models.py
"""Records returned by the remote data source.

Only the fields the backup writes are modelled; anything else the GitHub API
returns is ignored.
"""

from typing import Any

from pydantic import BaseModel, Field


class _Record(BaseModel):
    model_config = {"frozen": True, "extra": "ignore"}


class User(_Record):
    id: int
    login: str
    name: str | None = None
    email: str | None = None
    location: str | None = None
    avatar_url: str | None = None
    blog: str | None = None
    company: str | None = None
    created_at: str | None = None


class Organization(_Record):
    id: int
    login: str
    description: str | None = None


class Milestone(_Record):
    number: int
    title: str
    description: str | None = None
    state: str = "open"


class Repository(_Record):
    id: int
    name: str
    full_name: str
    owner: User
    language: str | None = None
    description: str | None = None
    homepage: str | None = None
    default_branch: str | None = None
    created_at: str | None = None


class Issue(_Record):
    number: int
    title: str
    body: str | None = None
    state: str = "open"
    assignee: User | None = None
    milestone: Milestone | None = None
    # Set by the issues API when the "issue" is really a pull request
    pull_request: dict[str, Any] | None = None

    @property
    def is_pull_request(self) -> bool:
        return self.pull_request is not None


class Comment(_Record):
    id: int
    body: str | None = None
    user: User | None = None


class Label(_Record):
    name: str


class PullRequest(_Record):
    number: int
    title: str
    body: str | None = None
    state: str = "open"
    milestone: Milestone | None = None
    labels: list[Label] = Field(default_factory=list)


class Hook(_Record):
    id: int
    name: str
    active: bool = True
    config: dict[str, Any] = Field(default_factory=dict)


class Team(_Record):
    id: int
    name: str
    slug: str
    permission: str | None = None


class CommitComment(_Record):
    id: int
    commit_id: str
    path: str | None = None
    line: int | None = None
    body: str | None = None
