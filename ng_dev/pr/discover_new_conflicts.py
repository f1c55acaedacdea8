"""Finds open pull requests that would run into conflicts once a given pull request is merged."""

from datetime import datetime

import structlog

from ng_dev.github.abc import GitHubClientBase
from ng_dev.pr.common.fetch import PendingPullRequest, fetch_pending_pull_requests_from_github
from ng_dev.utils.console import error, info
from ng_dev.utils.git_client import GitClient

logger = structlog.get_logger(__name__)

TEMP_BRANCH_NAME = "__NgDevRepoBaseAfterChange__"
"""Local branch holding the base branch with the requested pull request applied."""


def _is_candidate(pull_request: PendingPullRequest, base_ref_name: str, updated_after: datetime) -> bool:
    if pull_request.base_ref is None or pull_request.base_ref.name != base_ref_name:
        return False
    if pull_request.mergeable == "CONFLICTING":
        return False
    # Timestamps from GitHub are timezone aware, while the date given on the command line may not be.
    updated_at = pull_request.updated_at
    if updated_after.tzinfo is None:
        updated_at = updated_at.replace(tzinfo=None)
    return updated_at >= updated_after


def _rebase_pull_request_onto(git: GitClient, pull_request: PendingPullRequest, onto: str) -> bool:
    """Fetches the pull request head and rebases it onto a revision, returning whether it succeeded."""
    assert pull_request.head_ref is not None
    git.run(["fetch", "-q", git.add_token_to_url(pull_request.head_ref.repository.url), pull_request.head_ref.name])
    git.run(["checkout", "-q", "--detach", "FETCH_HEAD"])
    succeeded = git.run_graceful(["rebase", onto]).returncode == 0
    if not succeeded:
        git.run_graceful(["rebase", "--abort"])
    return succeeded


async def discover_new_conflicts_for_pr(
    git: GitClient,
    github: GitHubClientBase,
    pr_number: int,
    updated_after: datetime,
) -> int:
    """Checks which pending pull requests conflict after merging the given one.

    Only pull requests targeting the same base branch, updated on or after the given date
    and not already conflicting are checked. Returns the exit code of the command.
    """
    if git.has_uncommitted_changes():
        error("Cannot run with local changes. Please make sure there are no local changes.")
        return 1

    previous_branch_or_revision = git.get_current_branch_or_revision()
    info("Requesting pending PRs from Github")
    all_pending_prs = await fetch_pending_pull_requests_from_github(github)
    requested_pr = next((pr for pr in all_pending_prs if pr.number == pr_number), None)
    if requested_pr is None or requested_pr.base_ref is None or requested_pr.head_ref is None:
        error(f"The request PR, #{pr_number} was not found as a pending PR on github, please confirm")
        error("the PR number is correct and is an open PR")
        return 1

    pending_prs = [
        pr
        for pr in all_pending_prs
        if pr.number != pr_number and _is_candidate(pr, requested_pr.base_ref.name, updated_after)
    ]
    info(f"Retrieved {len(all_pending_prs)} total pending PRs")
    info(f"Checking {len(pending_prs)} PRs for conflicts after a merge of #{pr_number}")

    conflicts: list[PendingPullRequest] = []
    try:
        git.run(["fetch", "-q", git.add_token_to_url(requested_pr.base_ref.repository.url), requested_pr.base_ref.name])
        base_sha = git.run(["rev-parse", "FETCH_HEAD"]).stdout.strip()
        if not _rebase_pull_request_onto(git, requested_pr, base_sha):
            error("The requested PR currently has conflicts")
            return 1
        git.run(["checkout", "-q", "-B", TEMP_BRANCH_NAME])

        for pull_request in pending_prs:
            if pull_request.head_ref is None:
                logger.debug("Skipping pull request without head ref", pr_number=pull_request.number)
                continue
            if not _rebase_pull_request_onto(git, pull_request, TEMP_BRANCH_NAME):
                conflicts.append(pull_request)
    finally:
        git.checkout(previous_branch_or_revision, clean_state=True)
        git.run_graceful(["branch", "-D", TEMP_BRANCH_NAME])

    info()
    info("Result:")
    if not conflicts:
        info(f"No new conflicting PRs found after #{pr_number} merging")
        return 0

    error(f"{len(conflicts)} PR(s) which conflict(s) after #{pr_number} merges:")
    for pull_request in conflicts:
        error(f"  - #{pull_request.number}: {pull_request.title}")
    return 1
