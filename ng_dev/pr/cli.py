"""Commands for checking out, rebasing and merging pull requests."""

import asyncio
import os
from datetime import datetime, timedelta

import typer
from typer import Argument, Option
from typing_extensions import Annotated

from ng_dev.configuration.context import exit_on_cli_error, get_cli_context
from ng_dev.github.exceptions import GithubApiRequestError
from ng_dev.pr.check_target_branches import print_target_branches_for_pr
from ng_dev.pr.common.checkout import (
    MaintainerModifyAccessError,
    PullRequestNotFoundError,
    UnexpectedLocalChangesError,
    check_out_pull_request_locally,
)
from ng_dev.pr.discover_new_conflicts import discover_new_conflicts_for_pr
from ng_dev.pr.merge.task import MergeResult, MergeStatus, MergeTool
from ng_dev.pr.rebase import rebase_pr
from ng_dev.utils.console import error, green, info, prompt_confirm, red, yellow
from ng_dev.utils.constants import GITHUB_TOKEN_GENERATE_URL

pr_app = typer.Typer(help="Pull request tooling for caretakers.")


@pr_app.command(name="checkout")
@exit_on_cli_error
def checkout_cli(
    ctx: typer.Context,
    pr_number: Annotated[int, Argument(help="The number of the pull request to check out.")],
) -> None:
    """Check out a pull request locally in a detached state."""
    context = get_cli_context(ctx)
    try:
        checkout = asyncio.run(
            check_out_pull_request_locally(
                context.git_client, context.github, pr_number, allow_if_maintainer_cannot_modify=True
            )
        )
    except (UnexpectedLocalChangesError, PullRequestNotFoundError, MaintainerModifyAccessError) as exc:
        error(str(exc))
        raise typer.Exit(1) from exc
    info(green(f"Checked out the remote branch for pull request #{pr_number}"))
    info("To push the checked out branch back to its PR, run the following command:")
    info(f"  $ git push {checkout.head_ref_url} HEAD:{checkout.head_ref_name} {checkout.force_with_lease_flag}")


@pr_app.command(name="rebase")
@exit_on_cli_error
def rebase_cli(
    ctx: typer.Context,
    pr_number: Annotated[int, Argument(help="The number of the pull request to rebase.")],
) -> None:
    """Rebase a pull request on its base branch and push it back."""
    context = get_cli_context(ctx)
    raise typer.Exit(asyncio.run(rebase_pr(context.git_client, context.github, pr_number, context.is_ci)))


@pr_app.command(name="merge")
@exit_on_cli_error
def merge_cli(
    ctx: typer.Context,
    pr_number: Annotated[int, Argument(help="The number of the pull request to merge.")],
    branch_prompt: Annotated[
        bool, Option("--branch-prompt/--no-branch-prompt", help="Whether to confirm the targeted branches before merging.")
    ] = True,
) -> None:
    """Merge a pull request into its target branches."""
    context = get_cli_context(ctx)
    # Git hooks of the project should not run for the commits created while merging.
    os.environ["HUSKY"] = "0"
    tool = MergeTool(
        context.git_client,
        context.github,
        context.npm_registry,
        context.config,
        branch_prompt=branch_prompt,
        is_private_repo=context.github_config.private,
    )
    try:
        succeeded = _merge_and_report(tool, pr_number, force=False)
    except GithubApiRequestError as exc:
        if exc.status_code != 401:
            raise
        error("Github API request failed. " + exc.message)
        error("Please ensure that your provided token is valid.")
        error(f"You can generate a token here: {GITHUB_TOKEN_GENERATE_URL}")
        raise typer.Exit(1) from exc
    if not succeeded:
        raise typer.Exit(1)


def _merge_and_report(tool: MergeTool, pr_number: int, force: bool) -> bool:
    """Merges the pull request and prints the result, offering a forced retry for non-fatal failures."""
    result = asyncio.run(tool.merge(pr_number, force))
    if result.status == MergeStatus.SUCCESS:
        info(green(f"Successfully merged the pull request: #{pr_number}"))
        return True
    _print_merge_failure(tool, result, pr_number)
    if result.status == MergeStatus.FAILED and result.failure is not None and result.failure.non_fatal and not force:
        info(yellow("The pull request above failed due to non-critical errors."))
        info(yellow("This error can be forcibly ignored if desired."))
        if prompt_confirm("Do you want to forcibly proceed with merging?"):
            return _merge_and_report(tool, pr_number, force=True)
    return False


def _print_merge_failure(tool: MergeTool, result: MergeResult, pr_number: int) -> None:
    if result.status == MergeStatus.DIRTY_WORKING_DIR:
        error("Local working repository not clean. Please make sure there are no uncommitted changes.")
    elif result.status == MergeStatus.UNEXPECTED_SHALLOW_REPO:
        error("Unable to perform merge in a local repository that is configured as shallow.")
        error("Please convert the repository to a complete one by syncing with upstream.")
        error("https://git-scm.com/docs/git-fetch#Documentation/git-fetch.txt---unshallow")
    elif result.status == MergeStatus.UNKNOWN_GIT_ERROR:
        error("An unknown Git error has been thrown. Please check the output above for details.")
    elif result.status == MergeStatus.GITHUB_ERROR:
        error("An error related to interacting with Github has been discovered.")
        if tool.missing_scopes_message:
            error(tool.missing_scopes_message)
    elif result.status == MergeStatus.USER_ABORTED:
        info(f"Merge of pull request has been aborted manually: #{pr_number}")
    elif result.status == MergeStatus.FAILED:
        error(yellow("Could not merge the specified pull request."))
        if result.failure is not None:
            error(red(result.failure.message))

    if result.pushed_branches:
        info(f"Branches merged before the failure: {', '.join(result.pushed_branches)}")
    if result.failed_branches:
        error(f"Branches that could not be pushed: {', '.join(result.failed_branches)}")


@pr_app.command(name="check-target-branches")
@exit_on_cli_error
def check_target_branches_cli(
    ctx: typer.Context,
    pr_number: Annotated[int, Argument(help="The number of the pull request to check.")],
) -> None:
    """Print the branches a pull request would be merged into."""
    context = get_cli_context(ctx)
    raise typer.Exit(
        asyncio.run(print_target_branches_for_pr(context.github, context.npm_registry, context.config, pr_number))
    )


@pr_app.command(name="discover-new-conflicts")
@exit_on_cli_error
def discover_new_conflicts_cli(
    ctx: typer.Context,
    pr_number: Annotated[int, Argument(help="The number of the pull request that is about to be merged.")],
    date: Annotated[
        datetime | None,
        Option(formats=["%Y-%m-%d", "%m/%d/%Y"], help="Only consider pull requests updated since this date. Defaults to 30 days ago."),
    ] = None,
) -> None:
    """Find pending pull requests that conflict once a pull request is merged."""
    context = get_cli_context(ctx)
    raise typer.Exit(
        asyncio.run(
            discover_new_conflicts_for_pr(context.git_client, context.github, pr_number, date or get_thirty_days_ago_date())
        )
    )


def get_thirty_days_ago_date() -> datetime:
    """Gets midnight of the day thirty days ago."""
    today = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)
    return today - timedelta(days=30)
