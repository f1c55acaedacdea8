"""Checks out a pull request locally in a detached state."""

from dataclasses import dataclass

import structlog

from ng_dev.github.abc import GitHubClientBase
from ng_dev.pr.common.fetch import PullRequestFromGithub, fetch_pull_request_from_github
from ng_dev.utils.console import info
from ng_dev.utils.git_client import GitClient, GitCommandError

logger = structlog.get_logger(__name__)


class UnexpectedLocalChangesError(Exception):
    """Raised when local changes prevent switching branches."""

    pass


class PullRequestNotFoundError(Exception):
    """Raised when the pull request or its head ref cannot be found upstream."""

    pass


class MaintainerModifyAccessError(Exception):
    """Raised when the pull request does not allow maintainers to push to its branch."""

    pass


@dataclass
class PullRequestCheckout:
    """A pull request checked out locally, with helpers to push back or restore the repository."""

    git: GitClient
    pull_request: PullRequestFromGithub
    head_ref_name: str
    head_ref_url: str
    previous_branch_or_revision: str

    @property
    def force_with_lease_flag(self) -> str:
        """Flag for pushing back only if nobody pushed to the PR branch in the meantime."""
        return f"--force-with-lease={self.head_ref_name}:{self.pull_request.head_ref_oid}"

    def push_to_upstream(self) -> None:
        """Pushes the current HEAD to the branch of the pull request.

        Raises:
            GitCommandError: If the push fails.
        """
        self.git.run(["push", self.git.add_token_to_url(self.head_ref_url), f"HEAD:{self.head_ref_name}", self.force_with_lease_flag])

    def reset_git_state(self) -> bool:
        """Restores the branch or revision that was checked out before the pull request."""
        return self.git.checkout(self.previous_branch_or_revision, clean_state=True)


async def check_out_pull_request_locally(
    git: GitClient,
    github: GitHubClientBase,
    pr_number: int,
    allow_if_maintainer_cannot_modify: bool = False,
) -> PullRequestCheckout:
    """Checks out the head of a pull request in a detached state.

    Raises:
        UnexpectedLocalChangesError: If the working tree has uncommitted changes. Checked
            before any request is made.
        PullRequestNotFoundError: If the pull request or its head repository is missing.
        MaintainerModifyAccessError: If changes could not be pushed back to the pull request.
    """
    if git.has_uncommitted_changes():
        raise UnexpectedLocalChangesError("Unable to checkout PR due to uncommitted changes.")

    previous_branch_or_revision = git.get_current_branch_or_revision()
    pull_request = await fetch_pull_request_from_github(github, pr_number)
    if pull_request is None:
        raise PullRequestNotFoundError(f"Pull request #{pr_number} could not be found.")
    if pull_request.head_ref is None:
        raise PullRequestNotFoundError(f"The head branch of pull request #{pr_number} no longer exists.")

    head_ref_name = pull_request.head_ref.name
    full_head_ref = f"{pull_request.head_ref.repository.name_with_owner}:{head_ref_name}"
    head_ref_url = pull_request.head_ref.repository.url

    if not pull_request.maintainer_can_modify and not pull_request.viewer_did_author and not allow_if_maintainer_cannot_modify:
        raise MaintainerModifyAccessError("PR is not set to allow maintainers to modify the PR")

    try:
        info(f"Checking out PR #{pr_number} from {full_head_ref}")
        git.run(["fetch", "-q", git.add_token_to_url(head_ref_url), head_ref_name])
        git.run(["checkout", "--detach", "FETCH_HEAD"])
    except GitCommandError:
        git.checkout(previous_branch_or_revision, clean_state=True)
        raise

    logger.debug("Checked out pull request", pr_number=pr_number, head_ref=full_head_ref)
    return PullRequestCheckout(git, pull_request, head_ref_name, head_ref_url, previous_branch_or_revision)
