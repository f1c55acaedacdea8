"""Sets up the authenticated githubkit client."""

from typing import TypeAlias

from githubkit import GitHub
from githubkit.auth import TokenAuthStrategy

GitHubClient: TypeAlias = GitHub[TokenAuthStrategy]


class GithubTokenMissingError(Exception):
    """Raised when a command needs the GitHub API but no token is configured."""

    pass


def get_github_client(github_token: str | None, github_api_url: str) -> GitHubClient:
    """Returns an authenticated GitHub client using a personal access token."""
    if not github_token:
        raise GithubTokenMissingError(
            "No GitHub token set. Set the GITHUB_TOKEN environment variable or pass --github-token."
        )
    # Disable HTTP caching to always get fresh data
    return GitHub(auth=TokenAuthStrategy(github_token), base_url=github_api_url, http_cache=False)
