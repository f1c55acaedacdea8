"""Prints the branches a pull request would be merged into."""

from ng_dev.commit_message.parse import parse_commit_message
from ng_dev.configuration.models import NgDevConfig
from ng_dev.github.abc import GitHubClientBase
from ng_dev.npm.registry import NpmRegistryClientBase
from ng_dev.pr.common.failures import PullRequestFailure
from ng_dev.pr.common.fetch import fetch_pull_request_from_github
from ng_dev.pr.common.targeting import (
    InvalidTargetBranchError,
    InvalidTargetLabelError,
    get_target_branches_for_pull_request,
)
from ng_dev.utils.console import error, info


async def print_target_branches_for_pr(
    github: GitHubClientBase,
    registry: NpmRegistryClientBase,
    config: NgDevConfig,
    pr_number: int,
) -> int:
    """Prints the target branches of the pull request, returning the exit code of the command."""
    pull_request = await fetch_pull_request_from_github(github, pr_number)
    if pull_request is None:
        error(f"Pull request #{pr_number} could not be found.")
        return 1

    commits = [parse_commit_message(message) for message in pull_request.commit_messages]
    try:
        branches = await get_target_branches_for_pull_request(
            github, registry, config, pull_request.label_names, pull_request.base_ref_name, commits
        )
    except (InvalidTargetLabelError, InvalidTargetBranchError) as exc:
        error(exc.failure_message)
        return 1
    except PullRequestFailure as failure:
        error(failure.message)
        return 1

    info(f"PR #{pr_number} will merge into:")
    for branch in branches:
        info(f"- {branch}")
    return 0
