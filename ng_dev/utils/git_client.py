"""Wrapper around the git command line client of the local repository."""

import os
import subprocess
from pathlib import Path
from typing import Sequence

import structlog

from ng_dev.configuration.models import GithubConfig

logger = structlog.get_logger(__name__)


class GitCommandError(Exception):
    """Raised when a git command exits with a non-zero status."""

    def __init__(self, args: Sequence[str], status: int, stderr: str) -> None:
        """Initializes the exception with the already sanitized command arguments."""
        super().__init__(f"Command failed: git {' '.join(args)}")
        self.args_list = list(args)
        self.status = status
        self.stderr = stderr


def get_repo_base_dir(cwd: Path | None = None) -> Path:
    """Gets the root directory of the git repository containing cwd."""
    result = subprocess.run(["git", "rev-parse", "--show-toplevel"], cwd=cwd, capture_output=True, text=True)
    if result.returncode != 0:
        raise GitCommandError(["rev-parse", "--show-toplevel"], result.returncode, result.stderr)
    return Path(result.stdout.strip())


class GitClient:
    """Runs git commands in the local repository.

    When a GitHub token is provided, remote URLs embed it for authentication and the
    token is redacted from all logged and raised output.
    """

    def __init__(self, base_dir: Path, remote_config: GithubConfig, github_token: str | None = None) -> None:
        """Initialize the client for the repository at base_dir."""
        self.base_dir = base_dir
        self.remote_config = remote_config
        self.github_token = github_token
        self.main_branch_name = remote_config.main_branch_name

    def sanitize_console_output(self, value: str) -> str:
        """Redacts the GitHub token from the given text."""
        if not self.github_token:
            return value
        return value.replace(self.github_token, "<TOKEN>")

    def run_graceful(self, args: Sequence[str], env: dict[str, str] | None = None) -> subprocess.CompletedProcess[str]:
        """Runs a git command and returns the completed process regardless of its status."""
        logger.debug("Executing git command", args=self.sanitize_console_output(" ".join(args)))
        process_env = {**os.environ, **env} if env else None
        result = subprocess.run(["git", *args], cwd=self.base_dir, env=process_env, capture_output=True, text=True)
        if result.stderr:
            logger.debug("Git command stderr", stderr=self.sanitize_console_output(result.stderr.strip()))
        return result

    def run(self, args: Sequence[str], env: dict[str, str] | None = None) -> subprocess.CompletedProcess[str]:
        """Runs a git command, raising GitCommandError if it fails."""
        result = self.run_graceful(args, env=env)
        if result.returncode != 0:
            sanitized_args = [self.sanitize_console_output(arg) for arg in args]
            raise GitCommandError(sanitized_args, result.returncode, self.sanitize_console_output(result.stderr))
        return result

    def get_repo_git_url(self) -> str:
        """Gets the URL of the upstream repository, authenticated when a token is available."""
        owner, name = self.remote_config.owner, self.remote_config.name
        if self.remote_config.use_ssh:
            return f"git@github.com:{owner}/{name}.git"
        if self.github_token:
            return f"https://{self.github_token}@github.com/{owner}/{name}.git"
        return f"https://github.com/{owner}/{name}.git"

    def has_commit(self, branch_name: str, sha: str) -> bool:
        """Whether the given branch contains the specified commit."""
        return self.run_graceful(["branch", "--list", branch_name, "--contains", sha]).stdout.strip() != ""

    def is_shallow_repo(self) -> bool:
        """Whether the local repository is a shallow clone."""
        return self.run(["rev-parse", "--is-shallow-repository"]).stdout.strip() == "true"

    def get_current_branch_or_revision(self) -> str:
        """Gets the currently checked out branch, or the revision if HEAD is detached."""
        branch_name = self.run(["rev-parse", "--abbrev-ref", "HEAD"]).stdout.strip()
        if branch_name == "HEAD":
            return self.run(["rev-parse", "HEAD"]).stdout.strip()
        return branch_name

    def has_uncommitted_changes(self) -> bool:
        """Whether the working tree contains uncommitted changes."""
        self.run_graceful(["update-index", "-q", "--refresh"])
        return self.run_graceful(["diff-index", "--quiet", "HEAD"]).returncode != 0

    def checkout(self, branch_or_revision: str, clean_state: bool) -> bool:
        """Checks out a branch or revision, optionally discarding in-progress operations first."""
        if clean_state:
            self.run_graceful(["am", "--abort"])
            self.run_graceful(["cherry-pick", "--abort"])
            self.run_graceful(["rebase", "--abort"])
            self.run_graceful(["reset", "--hard"])
        return self.run_graceful(["checkout", branch_or_revision]).returncode == 0

    def all_changes_files_since(self, sha: str = "HEAD") -> list[str]:
        """Lists files changed since the given revision, including untracked files."""
        changed = self.run(["diff", "--name-only", "--diff-filter=d", sha]).stdout.splitlines()
        untracked = self.run(["ls-files", "--others", "--exclude-standard"]).stdout.splitlines()
        return sorted({file for file in [*changed, *untracked] if file})

    def all_staged_files(self) -> list[str]:
        """Lists files that are currently staged."""
        return [file for file in self.run(["diff", "--staged", "--name-only", "--diff-filter=ACM"]).stdout.splitlines() if file]

    def all_files(self) -> list[str]:
        """Lists all files tracked in the repository."""
        return [file for file in self.run(["ls-files"]).stdout.splitlines() if file]

    def list_tags(self) -> list[str]:
        """Lists the tags reachable from HEAD."""
        return [tag for tag in self.run(["tag", "--merged", "HEAD"]).stdout.splitlines() if tag]

    def add_token_to_url(self, https_url: str) -> str:
        """Adds the GitHub token to an HTTPS git URL so pushes and fetches are authenticated."""
        if not self.github_token or not https_url.startswith("https://"):
            return https_url
        return https_url.replace("https://", f"https://x-access-token:{self.github_token}@", 1)
