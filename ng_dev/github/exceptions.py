"""Contains exceptions raised by the GitHub client adapters."""


class GithubApiRequestError(Exception):
    """Raised when a GitHub API request fails with an error status."""

    def __init__(self, status_code: int, message: str, url: str | None = None) -> None:
        """Initializes the exception with the status code and GitHub's error message."""
        super().__init__(f"GitHub API request failed with status {status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.url = url
