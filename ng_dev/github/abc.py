"""Base ABC for GitHub clients."""

from abc import ABC, abstractmethod
from typing import Any


class GitHubClientBase(ABC):
    """Base ABC for GitHub clients.

    Failed requests raise GithubApiRequestError so that callers can react to the
    status code independent of the underlying HTTP library.
    """

    owner: str
    repo_name: str

    # GraphQL
    @abstractmethod
    async def graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run a GraphQL query and return its data."""
        pass

    # Pull Requests
    @abstractmethod
    async def get_pull_request(self, pull_number: int) -> Any:
        """Get a pull request of the repository."""
        pass

    @abstractmethod
    async def create_pull_request(self, title: str, head: str, base: str, body: str | None = None) -> Any:
        """Create a pull request for the repository."""
        pass

    @abstractmethod
    async def merge_pull_request(
        self,
        pull_number: int,
        merge_method: str,
        commit_title: str | None = None,
        commit_message: str | None = None,
    ) -> str:
        """Merge a pull request through the GitHub API and return the SHA of the merge commit."""
        pass

    @abstractmethod
    async def close_pull_request(self, pull_number: int) -> None:
        """Close a pull request without merging it."""
        pass

    @abstractmethod
    async def list_pull_request_commit_messages(self, pull_number: int) -> list[str]:
        """List the messages of all commits in a pull request, oldest first."""
        pass

    # Issues
    @abstractmethod
    async def add_labels(self, issue_number: int, labels: list[str]) -> None:
        """Add labels to an issue or pull request."""
        pass

    @abstractmethod
    async def post_comment(self, issue_number: int, body: str) -> None:
        """Post a comment on an issue or pull request."""
        pass

    @abstractmethod
    async def list_issue_events(self, issue_number: int) -> list[Any]:
        """List the timeline events of an issue or pull request."""
        pass

    # Commits, Branches and Refs
    @abstractmethod
    async def get_combined_status(self, ref: str) -> str:
        """Get the combined CI status state for a ref."""
        pass

    @abstractmethod
    async def get_commit_message(self, sha: str) -> str:
        """Get the message of a commit."""
        pass

    @abstractmethod
    async def list_branches(self, protected: bool | None = None) -> list[str]:
        """List the branch names of the repository."""
        pass

    @abstractmethod
    async def get_ref_sha(self, ref: str) -> str:
        """Get the commit SHA a ref points to, e.g. ``heads/main``."""
        pass

    @abstractmethod
    async def create_tag_ref(self, tag_name: str, sha: str) -> None:
        """Create a tag ref pointing to the given commit."""
        pass

    @abstractmethod
    async def get_file_content(self, path: str, ref: str) -> str:
        """Get the decoded content of a file at a ref."""
        pass

    # Releases
    @abstractmethod
    async def create_release(self, tag_name: str, name: str, body: str, prerelease: bool) -> Any:
        """Create a GitHub release for an existing tag."""
        pass

    # Users
    @abstractmethod
    async def get_token_scopes(self) -> list[str] | None:
        """Get the OAuth scopes of the token in use, or None if the token does not report scopes."""
        pass

    # Forks
    @abstractmethod
    async def branch_exists(self, owner: str, repo_name: str, branch: str) -> bool:
        """Whether a branch exists in the given repository."""
        pass
