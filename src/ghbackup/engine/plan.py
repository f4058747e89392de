# src/ghbackup/engine/plan.py
"""Backup plans: the traversal trees for user and repository targets.

A plan turns one backup target into TraversalNodes whose actions fetch remote
records and write them as artifacts. Listing nodes return one child node per
listed entity, so children are built only when the walk reaches them.

Sections are visited in a fixed order (owner, collaborators, issues, pull
requests, hooks, teams, commit comments, milestones; open before closed;
entities by ascending number or id), so identical remote data always gives
an identical sequence of checkpoints.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from functools import partial
from typing import TypeVar

from ghbackup.contracts import Fetched
from ghbackup.core.checkpoint import ROOT, CheckpointID, points
from ghbackup.engine.artifacts import ArtifactWriter
from ghbackup.engine.context import RunContext
from ghbackup.engine.orchestrator import TraversalNode
from ghbackup.remote import (
    CommitComment,
    Hook,
    Issue,
    Milestone,
    PullRequest,
    Repository,
    Team,
    User,
)

T = TypeVar("T")

# Remote accesses charged per step
SECTION_COST = 1
TEAMS_COST = 2
COMMIT_COMMENTS_COST = 2
MILESTONES_COST = 2


def _text(value: object) -> str:
    return "" if value is None else str(value)


def _milestone_title(milestone: Milestone | None) -> str:
    return "" if milestone is None else milestone.title


def _listing(fetched: Fetched[list[T]], render: Callable[[T], str]) -> list[str]:
    """Render a fetched sub-collection, one tab-indented line per item."""
    if not fetched.ok:
        return [f"\t{fetched.render()}"]
    return [f"\t{render(item)}" for item in fetched.value or []]


@dataclass
class _SectionedFile:
    """An artifact assembled from several independently resumable sections.

    The first section written this run replaces the file unless the run
    resumes at a later section of it; every later section appends.
    """

    path: str
    append: bool = False

    def write(self, artifacts: ArtifactWriter, lines: Iterable[str]) -> None:
        artifacts.write(self.path, lines, append=self.append)
        self.append = True


class BackupPlan:
    """Builds traversal trees over a RunContext.

    Example:
        plan = BackupPlan(context)
        TraversalOrchestrator(context).traverse(plan.for_repository(repo))
    """

    def __init__(self, context: RunContext) -> None:
        self._context = context
        self._remote = context.remote

    @property
    def context(self) -> RunContext:
        return self._context

    # -- Targets --

    def for_user(self, user: User) -> list[TraversalNode]:
        """Tree for a user target: the three sections of the user file."""
        return self._user_sections(user, ROOT)

    def for_repository(self, repo: Repository) -> list[TraversalNode]:
        """Tree for a repository target."""
        nodes = [
            TraversalNode(points.repo_owner(), SECTION_COST, partial(self._backup_owner, repo)),
            TraversalNode(
                points.repo_collaborators(), SECTION_COST, partial(self._backup_repo_info, repo)
            ),
        ]
        nodes.extend(
            TraversalNode(points.issues(state), SECTION_COST, partial(self._list_issues, repo, state))
            for state in points.STATES
        )
        nodes.extend(
            TraversalNode(points.pulls(state), SECTION_COST, partial(self._list_pulls, repo, state))
            for state in points.STATES
        )
        nodes.append(TraversalNode(points.hooks(), SECTION_COST, partial(self._backup_hooks, repo)))
        nodes.append(TraversalNode(points.teams(), TEAMS_COST, partial(self._list_teams, repo)))
        nodes.append(
            TraversalNode(
                points.commit_comments(),
                COMMIT_COMMENTS_COST,
                partial(self._backup_commit_comments, repo),
            )
        )
        nodes.extend(
            TraversalNode(
                points.milestones(state),
                MILESTONES_COST,
                partial(self._backup_milestones, repo, state),
            )
            for state in points.STATES
        )
        return nodes

    # -- Users --

    def _user_sections(self, user: User, base: CheckpointID) -> list[TraversalNode]:
        followers = points.user_followers(base)
        follows = points.user_follows(base)
        orgs = points.user_orgs(base)
        target = _SectionedFile(
            f"user_{user.id}.txt",
            append=self._context.markers.resumes_within(follows, orgs),
        )
        return [
            TraversalNode(followers, SECTION_COST, partial(self._write_user_info, user, target)),
            TraversalNode(follows, SECTION_COST, partial(self._write_user_follows, user, target)),
            TraversalNode(orgs, SECTION_COST, partial(self._write_user_orgs, user, target)),
        ]

    def _write_user_info(self, user: User, target: _SectionedFile) -> None:
        followers = self._context.optional(
            f"followers of {user.login}", partial(self._remote.list_followers, user.login)
        )
        lines = [
            f"name: {_text(user.name)}",
            f"email: {_text(user.email)}",
            f"location: {_text(user.location)}",
            f"avatar: {_text(user.avatar_url)}",
            f"blog: {_text(user.blog)}",
            f"company: {_text(user.company)}",
            f"created on: {_text(user.created_at)}",
            "followed by:",
        ]
        lines.extend(_listing(followers, lambda u: f"{u.login}, {u.id}"))
        target.write(self._context.artifacts, lines)

    def _write_user_follows(self, user: User, target: _SectionedFile) -> None:
        follows = self._context.optional(
            f"users followed by {user.login}", partial(self._remote.list_following, user.login)
        )
        target.write(
            self._context.artifacts,
            ["follows:", *_listing(follows, lambda u: f"{u.login}, {u.id}")],
        )

    def _write_user_orgs(self, user: User, target: _SectionedFile) -> None:
        orgs = self._context.optional(
            f"organizations of {user.login}", partial(self._remote.list_organizations, user.login)
        )
        target.write(
            self._context.artifacts,
            ["organizations:", *_listing(orgs, lambda org: org.login)],
        )

    # -- Repository --

    def _backup_owner(self, repo: Repository) -> list[TraversalNode]:
        # The owner embedded in the repository record lacks profile fields
        owner = self._remote.get_user(repo.owner.login) or repo.owner
        return self._user_sections(owner, points.repo_owner())

    def _backup_repo_info(self, repo: Repository) -> None:
        collaborators = self._context.optional(
            f"collaborators of {repo.full_name}",
            partial(self._remote.list_collaborators, repo.full_name),
        )
        lines = [
            f"name: {repo.name}",
            f"language: {_text(repo.language)}",
            f"description: {_text(repo.description)}",
            f"homepage: {_text(repo.homepage)}",
            f"default branch: {_text(repo.default_branch)}",
            f"created on: {_text(repo.created_at)}",
            "collaborators:",
        ]
        lines.extend(_listing(collaborators, lambda u: f"id: {u.id}"))
        self._context.artifacts.write("repo.txt", lines)

    # -- Issues --

    def _list_issues(self, repo: Repository, state: str) -> list[TraversalNode]:
        issues = sorted(self._remote.list_issues(repo.full_name, state), key=lambda i: i.number)
        return [
            TraversalNode(
                points.issue(state, issue.number),
                SECTION_COST,
                partial(self._backup_issue, repo, state, issue),
            )
            for issue in issues
        ]

    def _backup_issue(self, repo: Repository, state: str, issue: Issue) -> None:
        comments = self._context.optional(
            f"comments of issue #{issue.number}",
            partial(self._remote.list_issue_comments, repo.full_name, issue.number),
        )
        lines = [
            f"title: {issue.title}",
            "body:",
            _text(issue.body),
            f"assignee: {'' if issue.assignee is None else issue.assignee.login}",
            f"milestone: {_milestone_title(issue.milestone)}",
            "comments:",
        ]
        lines.extend(_listing(comments, lambda c: _text(c.body)))
        self._context.artifacts.write(f"issues/{state}/{issue.number}.txt", lines)

    # -- Pull requests --

    def _list_pulls(self, repo: Repository, state: str) -> list[TraversalNode]:
        pulls = sorted(self._remote.list_pulls(repo.full_name, state), key=lambda p: p.number)
        return [
            TraversalNode.group(
                points.pull(state, pr.number),
                partial(self._pull_sections, repo, state, pr),
            )
            for pr in pulls
        ]

    def _pull_sections(self, repo: Repository, state: str, pr: PullRequest) -> list[TraversalNode]:
        comments = points.pull_comments(state, pr.number)
        target = _SectionedFile(
            f"pull_requests/{state}/{pr.number}.txt",
            append=self._context.markers.resumes_within(comments),
        )
        return [
            TraversalNode(
                points.pull_merged(state, pr.number),
                SECTION_COST,
                partial(self._write_pull_details, repo, pr, target),
            ),
            TraversalNode(
                comments, SECTION_COST, partial(self._write_pull_comments, repo, pr, target)
            ),
        ]

    def _write_pull_details(self, repo: Repository, pr: PullRequest, target: _SectionedFile) -> None:
        merged = self._context.optional(
            f"merge status of pull request #{pr.number}",
            partial(self._remote.is_pull_merged, repo.full_name, pr.number),
        )
        lines = [
            f"title: {pr.title}",
            "body:",
            _text(pr.body),
            f"number: {pr.number}",
            f"milestone: {_milestone_title(pr.milestone)}",
            "labels:",
        ]
        lines.extend(f"\t{label.name}" for label in pr.labels)
        lines.append(f"merged: {merged.render()}")
        target.write(self._context.artifacts, lines)

    def _write_pull_comments(self, repo: Repository, pr: PullRequest, target: _SectionedFile) -> None:
        comments = self._context.optional(
            f"comments of pull request #{pr.number}",
            partial(self._remote.list_issue_comments, repo.full_name, pr.number),
        )
        target.write(
            self._context.artifacts,
            ["comments:", *_listing(comments, lambda c: _text(c.body))],
        )

    # -- Hooks, teams, commit comments, milestones --

    def _backup_hooks(self, repo: Repository) -> None:
        hooks: list[Hook] = sorted(self._remote.list_hooks(repo.full_name), key=lambda h: h.id)
        for hook in hooks:
            lines = [
                f"name: {hook.name}",
                f"is active: {str(hook.active).lower()}",
                "configuration:",
            ]
            lines.extend(f"{key} : {_text(hook.config[key])}" for key in sorted(hook.config))
            self._context.artifacts.write(f"hooks/{hook.id}.txt", lines)

    def _list_teams(self, repo: Repository) -> list[TraversalNode]:
        teams = sorted(self._remote.list_teams(repo.full_name), key=lambda t: t.id)
        return [
            TraversalNode(
                points.team_members(team.id),
                SECTION_COST,
                partial(self._backup_team, repo, team),
            )
            for team in teams
        ]

    def _backup_team(self, repo: Repository, team: Team) -> None:
        members = self._context.optional(
            f"members of team {team.slug}",
            partial(self._remote.list_team_members, repo.owner.login, team.slug),
        )
        lines = [
            f"name: {team.name}",
            f"permission: {_text(team.permission)}",
            "members:",
        ]
        lines.extend(_listing(members, lambda u: f"{u.login}, {u.id}"))
        self._context.artifacts.write(f"teams/{team.id}.txt", lines)

    def _backup_commit_comments(self, repo: Repository) -> None:
        by_commit: dict[str, list[CommitComment]] = {}
        for comment in self._remote.list_commit_comments(repo.full_name):
            by_commit.setdefault(comment.commit_id, []).append(comment)

        for sha in sorted(by_commit):
            lines: list[str] = []
            for comment in sorted(by_commit[sha], key=lambda c: c.id):
                lines.extend(
                    [
                        f"comment: {comment.id}",
                        f"\tpath: {_text(comment.path)}",
                        f"\tline: {_text(comment.line)}",
                        f"\tbody: {_text(comment.body)}",
                    ]
                )
            self._context.artifacts.write(f"commit_comments/{sha}.txt", lines)

    def _backup_milestones(self, repo: Repository, state: str) -> None:
        milestones = sorted(
            self._remote.list_milestones(repo.full_name, state), key=lambda m: m.number
        )
        for milestone in milestones:
            self._context.artifacts.write(
                f"milestones/{state}/{milestone.number}.txt",
                [
                    f"title: {milestone.title}",
                    f"description: {_text(milestone.description)}",
                    f"state: {milestone.state}",
                ],
            )
