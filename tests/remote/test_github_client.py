"""Tests for the GitHub REST client."""

from __future__ import annotations

import base64
from collections.abc import Callable

import httpx
import pytest

API = "https://api.github.com"


def make_client(handler: Callable[[httpx.Request], httpx.Response], **settings: object):
    from ghbackup.core.config import GitHubSettings
    from ghbackup.remote import GitHubClient

    return GitHubClient(GitHubSettings(**settings), transport=httpx.MockTransport(handler))


def user_payload(user_id: int, login: str) -> dict[str, object]:
    return {"id": user_id, "login": login, "name": login.title(), "site_admin": False}


class TestAuthentication:
    """Tests for request headers and credentials."""

    def test_token_sent_as_bearer(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"resources": {"core": {"remaining": 4999}}})

        with make_client(handler, token="secret") as client:
            assert client.remaining_quota() == 4999

        assert seen[0].headers["Authorization"] == "Bearer secret"
        assert seen[0].headers["User-Agent"].startswith("ghbackup/")

    def test_login_and_token_use_basic_auth(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"resources": {"core": {"remaining": 1}}})

        with make_client(handler, login="octocat", token="secret") as client:
            client.remaining_quota()

        expected = base64.b64encode(b"octocat:secret").decode()
        assert seen[0].headers["Authorization"] == f"Basic {expected}"

    def test_anonymous_sends_no_credentials(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"resources": {"core": {"remaining": 60}}})

        with make_client(handler) as client:
            client.remaining_quota()

        assert "Authorization" not in seen[0].headers


class TestFetches:
    """Tests for single-entity fetches."""

    def test_get_user(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/users/octocat"
            return httpx.Response(200, json={**user_payload(1, "octocat"), "email": "o@example.com"})

        with make_client(handler) as client:
            user = client.get_user("octocat")

        assert user is not None
        assert user.id == 1
        assert user.email == "o@example.com"

    def test_not_found_is_none(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"message": "Not Found"})

        with make_client(handler) as client:
            assert client.get_user("ghost") is None
            assert client.get_repository("ghost/none") is None

    def test_get_repository_with_owner(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "id": 7,
                    "name": "hello",
                    "full_name": "octocat/hello",
                    "owner": user_payload(1, "octocat"),
                    "default_branch": "main",
                },
            )

        with make_client(handler) as client:
            repo = client.get_repository("octocat/hello")

        assert repo is not None
        assert repo.owner.login == "octocat"
        assert repo.default_branch == "main"


class TestListings:
    """Tests for paginated listings."""

    def test_follows_link_pagination(self) -> None:
        """Every page is fetched by following Link: rel=next."""
        pages = {
            "1": ([user_payload(1, "a")], f'<{API}/users/octocat/followers?page=2>; rel="next"'),
            "2": ([user_payload(2, "b")], None),
        }
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            body, link = pages[request.url.params.get("page", "1")]
            headers = {"Link": link} if link else {}
            return httpx.Response(200, json=body, headers=headers)

        with make_client(handler, per_page=50) as client:
            followers = client.list_followers("octocat")

        assert [u.login for u in followers] == ["a", "b"]
        assert seen[0].url.params["per_page"] == "50"
        assert len(seen) == 2

    def test_issues_exclude_pull_requests(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["state"] == "closed"
            return httpx.Response(
                200,
                json=[
                    {"number": 1, "title": "bug"},
                    {"number": 2, "title": "pr", "pull_request": {"url": "x"}},
                ],
            )

        with make_client(handler) as client:
            issues = client.list_issues("octocat/hello", "closed")

        assert [i.number for i in issues] == [1]

    def test_team_members_use_org_path(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/orgs/acme/teams/core/members"
            return httpx.Response(200, json=[user_payload(3, "c")])

        with make_client(handler) as client:
            assert [u.id for u in client.list_team_members("acme", "core")] == [3]

    @pytest.mark.parametrize(("status", "merged"), [(204, True), (404, False)])
    def test_is_pull_merged(self, status: int, merged: bool) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/repos/octocat/hello/pulls/5/merge"
            return httpx.Response(status)

        with make_client(handler) as client:
            assert client.is_pull_merged("octocat/hello", 5) is merged


class TestErrors:
    """Tests for error mapping."""

    def test_server_error_raises_remote_error(self) -> None:
        from ghbackup.contracts import RemoteError

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502)

        with make_client(handler) as client, pytest.raises(RemoteError) as exc_info:
            client.list_hooks("octocat/hello")

        assert exc_info.value.status_code == 502

    def test_transport_error_raises_remote_error(self) -> None:
        from ghbackup.contracts import RemoteError

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        with make_client(handler) as client, pytest.raises(RemoteError):
            client.list_teams("octocat/hello")

    def test_unexpected_payload_raises_remote_error(self) -> None:
        from ghbackup.contracts import RemoteError

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[{"login": "no-id"}])

        with make_client(handler) as client, pytest.raises(RemoteError):
            client.list_collaborators("octocat/hello")

    def test_forbidden_listing_is_not_not_found(self) -> None:
        from ghbackup.contracts import RemoteError, RemoteNotFoundError

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403, json={"message": "Must have admin rights"})

        with make_client(handler) as client, pytest.raises(RemoteError) as exc_info:
            client.list_hooks("octocat/hello")

        assert not isinstance(exc_info.value, RemoteNotFoundError)


class TestPacing:
    """Tests for pacer integration."""

    def test_every_request_acquires_pacer(self) -> None:
        from ghbackup.core.config import GitHubSettings
        from ghbackup.remote import GitHubClient

        class CountingPacer:
            def __init__(self) -> None:
                self.count = 0

            def acquire(self, weight: int = 1) -> None:
                self.count += weight

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[])

        pacer = CountingPacer()
        client = GitHubClient(
            GitHubSettings(),
            pacer=pacer,  # type: ignore[arg-type]
            transport=httpx.MockTransport(handler),
        )
        client.list_hooks("octocat/hello")
        client.list_milestones("octocat/hello", "open")
        client.close()

        assert pacer.count == 2
