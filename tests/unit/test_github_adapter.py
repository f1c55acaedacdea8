"""Unit tests for the GitHubKitAdapter class and related GitHub operations."""

import base64
from unittest.mock import AsyncMock, MagicMock

import pytest
from githubkit.exception import RequestFailed

from ng_dev.github.adapter import GitHubKitAdapter
from ng_dev.github.exceptions import GithubApiRequestError


class DummyResponse:
    """A dummy response object to mock GitHub API responses."""

    def __init__(self, parsed_data: object = None, headers: dict[str, str] | None = None) -> None:
        """Initialize the dummy response with parsed data and headers."""
        self.parsed_data = parsed_data if parsed_data is not None else MagicMock()
        self.headers = headers or {}


def make_request_failed(status_code: int, message: str = "error") -> RequestFailed:
    """Create a githubkit request failure for the given status code."""
    response = MagicMock()
    response.status_code = status_code
    response.headers = {}
    response.json.return_value = {"message": message}
    error = RequestFailed.__new__(RequestFailed)
    error.request = response.raw_request
    error.response = response
    return error


@pytest.mark.asyncio
async def test_branch_exists_true() -> None:
    """Test that branch_exists returns True when the branch exists."""
    adapter = GitHubKitAdapter(MagicMock(), "angular", "angular")
    adapter.client.rest.repos.async_get_branch = AsyncMock(return_value=DummyResponse())
    assert await adapter.branch_exists("contributor", "angular", "fix-bug") is True
    adapter.client.rest.repos.async_get_branch.assert_awaited_once_with(owner="contributor", repo="angular", branch="fix-bug")


@pytest.mark.asyncio
async def test_branch_exists_not_found() -> None:
    """Test that branch_exists returns False when the branch does not exist."""
    adapter = GitHubKitAdapter(MagicMock(), "angular", "angular")
    adapter.client.rest.repos.async_get_branch = AsyncMock(side_effect=make_request_failed(404))
    assert await adapter.branch_exists("contributor", "angular", "missing") is False


@pytest.mark.asyncio
async def test_branch_exists_other_error() -> None:
    """Test that branch_exists raises GithubApiRequestError for non-404 errors."""
    adapter = GitHubKitAdapter(MagicMock(), "angular", "angular")
    adapter.client.rest.repos.async_get_branch = AsyncMock(side_effect=make_request_failed(500, "Server Error"))
    with pytest.raises(GithubApiRequestError) as exc_info:
        await adapter.branch_exists("contributor", "angular", "fix-bug")
    assert exc_info.value.status_code == 500
    assert exc_info.value.message == "Server Error"


@pytest.mark.asyncio
async def test_get_file_content_decodes_content() -> None:
    """Test that file contents are base64 decoded."""
    adapter = GitHubKitAdapter(MagicMock(), "angular", "angular")
    parsed = MagicMock()
    parsed.content = base64.b64encode(b'{"version": "10.1.0"}').decode()
    adapter.client.rest.repos.async_get_content = AsyncMock(return_value=DummyResponse(parsed))
    assert await adapter.get_file_content("package.json", "10.1.x") == '{"version": "10.1.0"}'


@pytest.mark.asyncio
async def test_list_branches_paginates() -> None:
    """Test that branches are collected across pages."""
    adapter = GitHubKitAdapter(MagicMock(), "angular", "angular")
    first_page = [MagicMock() for _ in range(2)]
    first_page[0].name, first_page[1].name = "main", "10.1.x"
    second_page = [MagicMock()]
    second_page[0].name = "10.0.x"
    adapter.client.rest.repos.async_list_branches = AsyncMock(side_effect=[DummyResponse(first_page), DummyResponse(second_page)])
    assert await adapter.list_branches(protected=True, per_page=2) == ["main", "10.1.x", "10.0.x"]
    assert adapter.client.rest.repos.async_list_branches.await_args.kwargs["protected"] is True


@pytest.mark.asyncio
async def test_get_token_scopes() -> None:
    """Test that OAuth scopes are read from the response headers."""
    adapter = GitHubKitAdapter(MagicMock(), "angular", "angular")
    adapter.client.rest.users.async_get_authenticated = AsyncMock(
        return_value=DummyResponse(headers={"x-oauth-scopes": "repo, workflow"})
    )
    assert await adapter.get_token_scopes() == ["repo", "workflow"]


@pytest.mark.asyncio
async def test_get_token_scopes_for_fine_grained_token() -> None:
    """Test that tokens without scope information return None."""
    adapter = GitHubKitAdapter(MagicMock(), "angular", "angular")
    adapter.client.rest.users.async_get_authenticated = AsyncMock(return_value=DummyResponse())
    assert await adapter.get_token_scopes() is None


@pytest.mark.asyncio
async def test_request_failures_are_translated() -> None:
    """Test that githubkit failures surface as GithubApiRequestError with the status code."""
    adapter = GitHubKitAdapter(MagicMock(), "angular", "angular")
    adapter.client.rest.pulls.async_get = AsyncMock(side_effect=make_request_failed(404, "Not Found"))
    with pytest.raises(GithubApiRequestError) as exc_info:
        await adapter.get_pull_request(1)
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_graphql_returns_data() -> None:
    """Test that GraphQL queries return the response data."""
    adapter = GitHubKitAdapter(MagicMock(), "angular", "angular")
    adapter.client.async_graphql = AsyncMock(return_value={"repository": {"name": "angular"}})
    assert await adapter.graphql("query { repository { name } }", {"owner": "angular"}) == {"repository": {"name": "angular"}}
