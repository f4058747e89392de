# src/ghbackup/remote/github.py
"""GitHub REST API implementation of the remote data source."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ghbackup import __version__
from ghbackup.contracts import RemoteError, RemoteNotFoundError
from ghbackup.core.logging import get_logger
from ghbackup.core.rate_limit.pacer import NoOpPacer, RequestPacer
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

if TYPE_CHECKING:
    from types import TracebackType

    from ghbackup.core.config import GitHubSettings

logger = get_logger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


def _parse(model: type[RecordT], data: Any) -> RecordT:
    """Validate one API payload, reporting schema mismatches as RemoteError."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise RemoteError(f"Unexpected {model.__name__} payload: {e}") from e


class GitHubClient:
    """Blocking GitHub REST client.

    Every request goes through the pacer first. Transport failures, timeouts
    and error statuses surface as RemoteError (RemoteNotFoundError for 404),
    which the backup engine treats as a skippable, per-step failure.

    Authentication:
    - token only: ``Authorization: Bearer <token>``
    - login + token: HTTP basic auth
    - neither: anonymous (60 requests per hour)

    Example:
        with GitHubClient(settings.github) as client:
            repo = client.get_repository("octocat/hello-world")
    """

    def __init__(
        self,
        settings: GitHubSettings,
        *,
        pacer: RequestPacer | NoOpPacer | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize client.

        Args:
            settings: GitHub connection settings
            pacer: Optional request pacer (defaults to no pacing)
            transport: Optional httpx transport (tests inject MockTransport)
        """
        self._per_page = settings.per_page
        self._pacer = pacer if pacer is not None else NoOpPacer()

        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": f"ghbackup/{__version__}",
        }
        auth: httpx.Auth | None = None
        if settings.token is not None and settings.login is not None:
            auth = httpx.BasicAuth(settings.login, settings.token)
        elif settings.token is not None:
            headers["Authorization"] = f"Bearer {settings.token}"

        self._client = httpx.Client(
            base_url=settings.api_url,
            headers=headers,
            auth=auth,
            timeout=settings.timeout_seconds,
            transport=transport,
        )

    # -- HTTP helpers --

    def _request(
        self, url: str, params: dict[str, Any] | None = None
    ) -> httpx.Response:
        self._pacer.acquire()
        logger.debug("GitHub request", url=url)
        try:
            return self._client.get(url, params=params)
        except httpx.HTTPError as e:
            raise RemoteError(f"GET {url} failed: {e}") from e

    @staticmethod
    def _check(response: httpx.Response) -> httpx.Response:
        if response.status_code == 404:
            raise RemoteNotFoundError(
                f"Not found: {response.request.url}", status_code=404
            )
        if response.status_code >= 400:
            raise RemoteError(
                f"GitHub returned {response.status_code} for {response.request.url}",
                status_code=response.status_code,
            )
        return response

    def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        response = self._check(self._request(url, params))
        try:
            return response.json()
        except ValueError as e:
            raise RemoteError(f"Malformed JSON from {response.request.url}") from e

    def _paginate(
        self, url: str, params: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Collect every page of a list endpoint by following ``Link: next``."""
        items: list[dict[str, Any]] = []
        next_url: str | None = url
        next_params: dict[str, Any] | None = {**(params or {}), "per_page": self._per_page}
        while next_url is not None:
            response = self._check(self._request(next_url, next_params))
            try:
                page = response.json()
            except ValueError as e:
                raise RemoteError(f"Malformed JSON from {response.request.url}") from e
            if not isinstance(page, list):
                raise RemoteError(f"Expected a list from {response.request.url}")
            items.extend(page)
            next_url = response.links.get("next", {}).get("url")
            # The next link already carries the query string
            next_params = None
        return items

    # -- RemoteSource --

    def remaining_quota(self) -> int:
        """Remaining core API accesses. Does not count against the quota."""
        data = self._get_json("/rate_limit")
        try:
            return int(data["resources"]["core"]["remaining"])
        except (KeyError, TypeError, ValueError) as e:
            raise RemoteError("Unexpected /rate_limit payload") from e

    def get_user(self, login: str) -> User | None:
        try:
            return _parse(User, self._get_json(f"/users/{login}"))
        except RemoteNotFoundError:
            return None

    def get_repository(self, full_name: str) -> Repository | None:
        try:
            return _parse(Repository, self._get_json(f"/repos/{full_name}"))
        except RemoteNotFoundError:
            return None

    def list_followers(self, login: str) -> list[User]:
        return [_parse(User, u) for u in self._paginate(f"/users/{login}/followers")]

    def list_following(self, login: str) -> list[User]:
        return [_parse(User, u) for u in self._paginate(f"/users/{login}/following")]

    def list_organizations(self, login: str) -> list[Organization]:
        return [
            _parse(Organization, o)
            for o in self._paginate(f"/users/{login}/orgs")
        ]

    def list_collaborators(self, full_name: str) -> list[User]:
        return [
            _parse(User, u)
            for u in self._paginate(f"/repos/{full_name}/collaborators")
        ]

    def list_issues(self, full_name: str, state: str) -> list[Issue]:
        raw = self._paginate(
            f"/repos/{full_name}/issues",
            {"state": state, "sort": "created", "direction": "asc"},
        )
        issues = [_parse(Issue, i) for i in raw]
        return [issue for issue in issues if not issue.is_pull_request]

    def list_issue_comments(self, full_name: str, number: int) -> list[Comment]:
        return [
            _parse(Comment, c)
            for c in self._paginate(f"/repos/{full_name}/issues/{number}/comments")
        ]

    def list_pulls(self, full_name: str, state: str) -> list[PullRequest]:
        return [
            _parse(PullRequest, p)
            for p in self._paginate(
                f"/repos/{full_name}/pulls",
                {"state": state, "sort": "created", "direction": "asc"},
            )
        ]

    def is_pull_merged(self, full_name: str, number: int) -> bool:
        # 204 when merged, 404 when not
        response = self._request(f"/repos/{full_name}/pulls/{number}/merge")
        if response.status_code == 204:
            return True
        if response.status_code == 404:
            return False
        self._check(response)
        return False

    def list_hooks(self, full_name: str) -> list[Hook]:
        return [_parse(Hook, h) for h in self._paginate(f"/repos/{full_name}/hooks")]

    def list_teams(self, full_name: str) -> list[Team]:
        return [_parse(Team, t) for t in self._paginate(f"/repos/{full_name}/teams")]

    def list_team_members(self, org: str, team_slug: str) -> list[User]:
        return [
            _parse(User, u)
            for u in self._paginate(f"/orgs/{org}/teams/{team_slug}/members")
        ]

    def list_commit_comments(self, full_name: str) -> list[CommitComment]:
        return [
            _parse(CommitComment, c)
            for c in self._paginate(f"/repos/{full_name}/comments")
        ]

    def list_milestones(self, full_name: str, state: str) -> list[Milestone]:
        return [
            _parse(Milestone, m)
            for m in self._paginate(
                f"/repos/{full_name}/milestones",
                {"state": state, "sort": "due_on", "direction": "asc"},
            )
        ]

    # -- Lifecycle --

    def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        self._client.close()

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
