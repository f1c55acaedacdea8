"""GitHub client adapter for the githubkit library."""

import base64
from functools import wraps
from typing import Any, Awaitable, Callable, Self, TypeVar

import structlog
from githubkit import Response
from githubkit.exception import GraphQLFailed, RequestFailed
from githubkit.versions.latest.models import (
    CombinedCommitStatus,
    PullRequest,
    PullRequestMergeResult,
    Release,
)

from ng_dev.configuration.models import GithubConfig
from ng_dev.utils.retry import retry_on_rate_limit

from .abc import GitHubClientBase
from .client import GitHubClient, get_github_client
from .exceptions import GithubApiRequestError

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def handle_github_errors(func: F) -> F:
    """Decorator translating githubkit request failures into GithubApiRequestError."""

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)
        except RequestFailed as exc:
            status_code = exc.response.status_code
            try:
                message = exc.response.json().get("message", str(exc))
            except ValueError:
                message = str(exc)
            url = str(getattr(exc.response, "url", "")) or None
            logger.debug("GitHub request failed", function=func.__name__, status_code=status_code, message=message, url=url)
            raise GithubApiRequestError(status_code, message, url) from exc

    return wrapper  # type: ignore


class GitHubKitAdapter(GitHubClientBase):
    """GitHub client adapter for the githubkit library."""

    def __init__(self, client: GitHubClient, owner: str, repo_name: str) -> None:
        """Initialize the GitHub client adapter with an already-initialized client."""
        self.client = client
        self.owner = owner
        self.repo_name = repo_name

    def _omit_null_parameters(self, **kwargs: Any) -> dict[str, Any]:
        """Omit parameters that are None."""
        return {k: v for k, v in kwargs.items() if v is not None}

    @classmethod
    def create(cls, remote: GithubConfig, github_token: str | None, github_api_url: str = "https://api.github.com") -> Self:
        """Create a new GitHub client adapter for the configured remote repository."""
        logger.debug(
            "Creating client for GitHub instance and repository",
            github_api_url=github_api_url,
            owner=remote.owner,
            repo_name=remote.name,
        )
        return cls(get_github_client(github_token, github_api_url), remote.owner, remote.name)

    # GraphQL
    @handle_github_errors
    @retry_on_rate_limit()
    async def graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run a GraphQL query and return its data."""
        try:
            data: dict[str, Any] = await self.client.async_graphql(query, variables=variables)
        except GraphQLFailed as exc:
            errors = exc.response.errors or []
            not_found = any(error.type == "NOT_FOUND" for error in errors)
            message = "; ".join(error.message for error in errors)
            logger.debug("GitHub GraphQL query failed", not_found=not_found, message=message)
            raise GithubApiRequestError(404 if not_found else 422, message) from exc
        return data

    # Pull Requests
    @handle_github_errors
    @retry_on_rate_limit()
    async def get_pull_request(self, pull_number: int) -> PullRequest:
        """Get a pull request of the repository."""
        response: Response[PullRequest] = await self.client.rest.pulls.async_get(
            owner=self.owner, repo=self.repo_name, pull_number=pull_number
        )
        return response.parsed_data

    @handle_github_errors
    @retry_on_rate_limit()
    async def create_pull_request(self, title: str, head: str, base: str, body: str | None = None) -> PullRequest:
        """Create a pull request for the repository."""
        params = self._omit_null_parameters(title=title, head=head, base=base, body=body)
        response: Response[PullRequest] = await self.client.rest.pulls.async_create(owner=self.owner, repo=self.repo_name, **params)
        logger.info("Created pull request", number=response.parsed_data.number, head=head, base=base)
        return response.parsed_data

    @handle_github_errors
    async def merge_pull_request(
        self,
        pull_number: int,
        merge_method: str,
        commit_title: str | None = None,
        commit_message: str | None = None,
    ) -> str:
        """Merge a pull request through the GitHub API and return the SHA of the merge commit."""
        params = self._omit_null_parameters(merge_method=merge_method, commit_title=commit_title, commit_message=commit_message)
        response: Response[PullRequestMergeResult] = await self.client.rest.pulls.async_merge(
            owner=self.owner, repo=self.repo_name, pull_number=pull_number, **params
        )
        logger.info("Merged pull request through the GitHub API", pull_number=pull_number, merge_method=merge_method)
        return response.parsed_data.sha

    @handle_github_errors
    @retry_on_rate_limit()
    async def close_pull_request(self, pull_number: int) -> None:
        """Close a pull request without merging it."""
        await self.client.rest.pulls.async_update(owner=self.owner, repo=self.repo_name, pull_number=pull_number, state="closed")

    @handle_github_errors
    @retry_on_rate_limit()
    async def list_pull_request_commit_messages(self, pull_number: int, per_page: int = 100) -> list[str]:
        """List the messages of all commits in a pull request, handling pagination."""
        messages: list[str] = []
        page = 1
        while True:
            response = await self.client.rest.pulls.async_list_commits(
                owner=self.owner, repo=self.repo_name, pull_number=pull_number, per_page=per_page, page=page
            )
            commits = response.parsed_data
            messages.extend(commit.commit.message for commit in commits)
            if len(commits) < per_page:
                break
            page += 1
        return messages

    # Issues
    @handle_github_errors
    @retry_on_rate_limit()
    async def add_labels(self, issue_number: int, labels: list[str]) -> None:
        """Add labels to an issue or pull request."""
        await self.client.rest.issues.async_add_labels(owner=self.owner, repo=self.repo_name, issue_number=issue_number, labels=labels)

    @handle_github_errors
    @retry_on_rate_limit()
    async def post_comment(self, issue_number: int, body: str) -> None:
        """Post a comment on an issue or pull request."""
        await self.client.rest.issues.async_create_comment(owner=self.owner, repo=self.repo_name, issue_number=issue_number, body=body)

    @handle_github_errors
    @retry_on_rate_limit()
    async def list_issue_events(self, issue_number: int, per_page: int = 100) -> list[Any]:
        """List the timeline events of an issue or pull request, handling pagination."""
        all_events: list[Any] = []
        page = 1
        while True:
            response = await self.client.rest.issues.async_list_events(
                owner=self.owner, repo=self.repo_name, issue_number=issue_number, per_page=per_page, page=page
            )
            events = response.parsed_data
            all_events.extend(events)
            if len(events) < per_page:
                break
            page += 1
        return all_events

    # Commits, Branches and Refs
    @handle_github_errors
    @retry_on_rate_limit()
    async def get_combined_status(self, ref: str) -> str:
        """Get the combined CI status state for a ref."""
        response: Response[CombinedCommitStatus] = await self.client.rest.repos.async_get_combined_status_for_ref(
            owner=self.owner, repo=self.repo_name, ref=ref
        )
        return response.parsed_data.state

    @handle_github_errors
    @retry_on_rate_limit()
    async def get_commit_message(self, sha: str) -> str:
        """Get the message of a commit."""
        response = await self.client.rest.repos.async_get_commit(owner=self.owner, repo=self.repo_name, ref=sha)
        return response.parsed_data.commit.message

    @handle_github_errors
    @retry_on_rate_limit()
    async def list_branches(self, protected: bool | None = None, per_page: int = 100) -> list[str]:
        """List the branch names of the repository, handling pagination."""
        names: list[str] = []
        page = 1
        while True:
            params = self._omit_null_parameters(protected=protected)
            response = await self.client.rest.repos.async_list_branches(
                owner=self.owner, repo=self.repo_name, per_page=per_page, page=page, **params
            )
            branches = response.parsed_data
            names.extend(branch.name for branch in branches)
            if len(branches) < per_page:
                break
            page += 1
        logger.debug("Retrieved branches", owner=self.owner, repo=self.repo_name, branch_count=len(names))
        return names

    @handle_github_errors
    @retry_on_rate_limit()
    async def get_ref_sha(self, ref: str) -> str:
        """Get the commit SHA a ref points to, e.g. ``heads/main``."""
        response = await self.client.rest.git.async_get_ref(owner=self.owner, repo=self.repo_name, ref=ref)
        return response.parsed_data.object_.sha

    @handle_github_errors
    @retry_on_rate_limit()
    async def create_tag_ref(self, tag_name: str, sha: str) -> None:
        """Create a tag ref pointing to the given commit."""
        await self.client.rest.git.async_create_ref(owner=self.owner, repo=self.repo_name, ref=f"refs/tags/{tag_name}", sha=sha)
        logger.info("Created tag", tag_name=tag_name, sha=sha)

    @handle_github_errors
    @retry_on_rate_limit()
    async def get_file_content(self, path: str, ref: str) -> str:
        """Get the decoded content of a file at a ref."""
        response = await self.client.rest.repos.async_get_content(owner=self.owner, repo=self.repo_name, path=path, ref=ref)
        return base64.b64decode(response.parsed_data.content).decode("utf-8")

    # Releases
    @handle_github_errors
    @retry_on_rate_limit()
    async def create_release(self, tag_name: str, name: str, body: str, prerelease: bool) -> Release:
        """Create a GitHub release for an existing tag."""
        response: Response[Release] = await self.client.rest.repos.async_create_release(
            owner=self.owner, repo=self.repo_name, tag_name=tag_name, name=name, body=body, prerelease=prerelease
        )
        logger.info("Created GitHub release", tag_name=tag_name, prerelease=prerelease)
        return response.parsed_data

    # Users
    @handle_github_errors
    @retry_on_rate_limit()
    async def get_token_scopes(self) -> list[str] | None:
        """Get the OAuth scopes of the token in use, or None for tokens without scopes (e.g. fine-grained tokens)."""
        response = await self.client.rest.users.async_get_authenticated()
        scopes_header = response.headers.get("x-oauth-scopes")
        if scopes_header is None:
            return None
        return [scope.strip() for scope in scopes_header.split(",") if scope.strip()]

    # Forks
    @handle_github_errors
    @retry_on_rate_limit()
    async def branch_exists(self, owner: str, repo_name: str, branch: str) -> bool:
        """Whether a branch exists in the given repository, e.g. a fork of the upstream repository."""
        try:
            await self.client.rest.repos.async_get_branch(owner=owner, repo=repo_name, branch=branch)
        except RequestFailed as exc:
            if exc.response.status_code == 404:
                return False
            raise
        return True
