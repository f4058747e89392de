# tests/conftest.py
"""Shared test fixtures and helpers.

Provides in-memory stand-ins for the two collaborators of a backup run:
- FakeRemote: a RemoteSource answering from canned data
- FakeWorkTree: a WorkTree that records version control operations and keeps
  committed file snapshots per branch

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from hypothesis import Phase, Verbosity, settings

from ghbackup.contracts import RemoteError, WorkingTreeError
from ghbackup.core.checkpoint import ResumeMarkerStore
from ghbackup.core.rate_limit import AccessBudget
from ghbackup.engine import ArtifactWriter, RunContext
from ghbackup.remote import Repository, User

# =============================================================================
# Hypothesis Configuration
# =============================================================================

# CI profile: Fast tests for continuous integration
settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

# Nightly profile: Thorough testing for scheduled runs
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Debug profile: Minimal examples with verbose output for debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Load profile from environment, default to "ci"
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


# =============================================================================
# Fake remote
# =============================================================================

_LISTINGS = {
    "list_followers",
    "list_following",
    "list_organizations",
    "list_collaborators",
    "list_issues",
    "list_issue_comments",
    "list_pulls",
    "list_hooks",
    "list_teams",
    "list_team_members",
    "list_commit_comments",
    "list_milestones",
}


class FakeRemote:
    """RemoteSource answering from ``answers`` keyed by (method, *args).

    Listings default to empty, fetches to None and merge status to False.
    Keys in ``failures`` raise RemoteError instead. Every call is appended
    to ``calls``.

    Usage:
        remote = FakeRemote(quota=50)
        remote.answer("list_issues", "o/r", "open", [Issue(number=1, title="t")])
        remote.fail("list_hooks", "o/r")
    """

    def __init__(self, quota: int = 1000) -> None:
        self.quota = quota
        self.answers: dict[tuple[Any, ...], Any] = {}
        self.failures: set[tuple[Any, ...]] = set()
        self.calls: list[tuple[Any, ...]] = []

    def answer(self, method: str, *args: Any) -> None:
        *key_args, value = args
        self.answers[(method, *key_args)] = value

    def fail(self, method: str, *args: Any) -> None:
        self.failures.add((method, *args))

    def add_user(self, user: User) -> None:
        self.answer("get_user", user.login, user)

    def add_repository(self, repo: Repository) -> None:
        self.answer("get_repository", repo.full_name, repo)

    def _respond(self, method: str, *args: Any) -> Any:
        key = (method, *args)
        self.calls.append(key)
        if key in self.failures:
            raise RemoteError(f"{method}{args} failed", status_code=500)
        if key in self.answers:
            return self.answers[key]
        if method in _LISTINGS:
            return []
        if method == "is_pull_merged":
            return False
        return None

    def remaining_quota(self) -> int:
        self.calls.append(("remaining_quota",))
        if ("remaining_quota",) in self.failures:
            raise RemoteError("rate limit unavailable")
        return self.quota

    def get_user(self, login: str) -> Any:
        return self._respond("get_user", login)

    def get_repository(self, full_name: str) -> Any:
        return self._respond("get_repository", full_name)

    def list_followers(self, login: str) -> Any:
        return self._respond("list_followers", login)

    def list_following(self, login: str) -> Any:
        return self._respond("list_following", login)

    def list_organizations(self, login: str) -> Any:
        return self._respond("list_organizations", login)

    def list_collaborators(self, full_name: str) -> Any:
        return self._respond("list_collaborators", full_name)

    def list_issues(self, full_name: str, state: str) -> Any:
        return self._respond("list_issues", full_name, state)

    def list_issue_comments(self, full_name: str, number: int) -> Any:
        return self._respond("list_issue_comments", full_name, number)

    def list_pulls(self, full_name: str, state: str) -> Any:
        return self._respond("list_pulls", full_name, state)

    def is_pull_merged(self, full_name: str, number: int) -> Any:
        return self._respond("is_pull_merged", full_name, number)

    def list_hooks(self, full_name: str) -> Any:
        return self._respond("list_hooks", full_name)

    def list_teams(self, full_name: str) -> Any:
        return self._respond("list_teams", full_name)

    def list_team_members(self, org: str, team_slug: str) -> Any:
        return self._respond("list_team_members", org, team_slug)

    def list_commit_comments(self, full_name: str) -> Any:
        return self._respond("list_commit_comments", full_name)

    def list_milestones(self, full_name: str, state: str) -> Any:
        return self._respond("list_milestones", full_name, state)


# =============================================================================
# Fake working tree
# =============================================================================


class FakeWorkTree:
    """WorkTree that records operations instead of running git.

    Files are real (under ``root``) so artifacts and the marker file can be
    inspected, but branches only exist as snapshots of committed content.
    Operation names in ``failing`` raise WorkingTreeError.
    """

    def __init__(self, root: Path, ref: str = "main") -> None:
        root.mkdir(parents=True, exist_ok=True)
        self._root = root
        self.ref = ref
        self.branches: set[str] = {ref}
        self.modifications: set[str] = set()
        self.stashes = 0
        self.staged: dict[str, str] = {}
        self.snapshots: dict[str, dict[str, str]] = {}
        self.commits: list[tuple[str, str]] = []
        self.operations: list[str] = []
        self.failing: set[str] = set()
        self.origin: str | None = None

    @property
    def root(self) -> Path:
        return self._root

    def _op(self, name: str) -> None:
        self.operations.append(name)
        if name in self.failing:
            raise WorkingTreeError(f"{name} failed")

    def _rel(self, path: Path) -> str:
        return path.relative_to(self._root).as_posix()

    def current_ref(self) -> str:
        self._op("current_ref")
        return self.ref

    def local_modifications(self) -> set[str]:
        self._op("local_modifications")
        return set(self.modifications)

    def stash(self) -> None:
        self._op("stash")
        self.stashes += 1
        self.modifications.clear()

    def unstash(self) -> None:
        self._op("unstash")
        self.stashes -= 1

    def branch_exists(self, name: str) -> bool:
        self._op("branch_exists")
        return name in self.branches

    def checkout(self, ref: str) -> None:
        self._op(f"checkout:{ref}")
        self.ref = ref

    def create_orphan_branch(self, name: str) -> None:
        self._op(f"create_orphan_branch:{name}")
        self.branches.add(name)
        self.ref = name
        self.staged.clear()

    def stage(self, path: Path) -> None:
        self._op("stage")
        self.staged[self._rel(path)] = "add"

    def unstage(self, path: Path) -> None:
        self._op("unstage")
        rel = self._rel(path)
        if rel in self.snapshots.get(self.ref, {}):
            self.staged[rel] = "delete"
        else:
            self.staged.pop(rel, None)

    def has_staged_changes(self) -> bool:
        self._op("has_staged_changes")
        return bool(self.staged)

    def commit(self, message: str) -> None:
        self._op("commit")
        snapshot = self.snapshots.setdefault(self.ref, {})
        for rel, change in self.staged.items():
            if change == "delete":
                snapshot.pop(rel, None)
            else:
                snapshot[rel] = (self._root / rel).read_text(encoding="utf-8")
        self.commits.append((self.ref, message))
        self.staged.clear()

    def clean_untracked(self) -> None:
        self._op("clean_untracked")

    def origin_url(self) -> str | None:
        return self.origin

    def show(self, ref: str, path: str) -> str | None:
        return self.snapshots.get(ref, {}).get(path)


@pytest.fixture
def fake_remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def fake_worktree(tmp_path: Path) -> FakeWorkTree:
    return FakeWorkTree(tmp_path / "repo")


@pytest.fixture
def make_context(fake_remote: FakeRemote, fake_worktree: FakeWorkTree) -> Callable[..., RunContext]:
    """Factory for a RunContext over the fakes with a given budget.

    The marker store is loaded, so a marker file written beforehand puts the
    context in resume mode.
    """

    def _make(budget: int = 1000, remote: Any = None) -> RunContext:
        markers = ResumeMarkerStore(fake_worktree.root / "RESUME_FILE")
        markers.load()
        return RunContext(
            remote=remote if remote is not None else fake_remote,
            budget=AccessBudget(budget),
            markers=markers,
            artifacts=ArtifactWriter(fake_worktree),
        )

    return _make


# =============================================================================
# Real git repositories
# =============================================================================

@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """A fresh git repository with one commit on ``main``."""
    repo = tmp_path / "local"
    repo.mkdir()

    def git(*args: str) -> None:
        subprocess.run(["git", *args], cwd=repo, check=True, capture_output=True)

    git("init", "-q")
    git("symbolic-ref", "HEAD", "refs/heads/main")
    git("config", "user.email", "backup@example.com")
    git("config", "user.name", "Backup Tests")
    git("config", "commit.gpgsign", "false")
    (repo / "README.md").write_text("project\n")
    git("add", "README.md")
    git("commit", "-q", "-m", "initial")
    return repo
