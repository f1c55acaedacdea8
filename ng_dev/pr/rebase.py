"""Rebases a pull request on its base branch and pushes it back."""

import structlog

from ng_dev.commit_message.parse import get_commits_in_range
from ng_dev.github.abc import GitHubClientBase
from ng_dev.pr.common.fetch import fetch_pull_request_from_github
from ng_dev.utils.console import error, green, info, prompt_confirm, red
from ng_dev.utils.git_client import GitClient

logger = structlog.get_logger(__name__)


async def rebase_pr(git: GitClient, github: GitHubClientBase, pr_number: int, is_ci: bool = False) -> int:
    """Rebases the pull request on its base branch, returning the exit code of the command.

    Fixup commits are squashed when the operator agrees. Outside of CI, a rebase that
    cannot complete automatically may be finished manually.
    """
    if git.has_uncommitted_changes():
        error("Cannot perform rebase of PR with local changes.")
        return 1

    previous_branch_or_revision = git.get_current_branch_or_revision()
    pull_request = await fetch_pull_request_from_github(github, pr_number)
    if pull_request is None or pull_request.head_ref is None or pull_request.base_ref is None:
        error(f"Pull request #{pr_number} or its branches could not be found.")
        return 1

    head_ref_url = git.add_token_to_url(pull_request.head_ref.repository.url)
    base_ref_url = git.add_token_to_url(pull_request.base_ref.repository.url)
    full_head_ref = f"{pull_request.head_ref.repository.name_with_owner}:{pull_request.head_ref.name}"
    full_base_ref = f"{pull_request.base_ref.repository.name_with_owner}:{pull_request.base_ref.name}"
    force_with_lease_flag = f"--force-with-lease={pull_request.head_ref.name}:{pull_request.head_ref_oid}"

    if not pull_request.maintainer_can_modify and not pull_request.viewer_did_author:
        error(
            "Cannot rebase as you did not author the PR and the PR does not allow maintainers "
            "to modify the PR"
        )
        return 1

    try:
        info(f"Checking out PR #{pr_number} from {full_head_ref}")
        git.run(["fetch", "-q", head_ref_url, pull_request.head_ref.name])
        git.run(["checkout", "-q", "--detach", "FETCH_HEAD"])

        info(f"Fetching {full_base_ref} to rebase #{pr_number} on")
        git.run(["fetch", "-q", base_ref_url, pull_request.base_ref.name])
        common_ancestor_sha = git.run(["merge-base", "HEAD", "FETCH_HEAD"]).stdout.strip()
        commits = get_commits_in_range(git, common_ancestor_sha, "HEAD")

        squash_fixups = False
        if not is_ci and any(commit.is_fixup for commit in commits):
            squash_fixups = prompt_confirm(
                f"PR #{pr_number} contains fixup commits, would you like to squash them during rebase?", default=True
            )

        info(f"Attempting to rebase PR #{pr_number} on {full_base_ref}")
        rebase_args = ["--interactive", "--autosquash"] if squash_fixups else []
        rebase_env = {"GIT_SEQUENCE_EDITOR": "true"} if squash_fixups else None
        rebase_result = git.run_graceful(["rebase", *rebase_args, "FETCH_HEAD"], env=rebase_env)

        if rebase_result.returncode == 0:
            info("Rebase was able to complete automatically without conflicts")
            info(f"Pushing rebased PR #{pr_number} to {full_head_ref}")
            git.run(["push", head_ref_url, f"HEAD:{pull_request.head_ref.name}", force_with_lease_flag])
            info(green(f"Rebased and updated PR #{pr_number}"))
            git.checkout(previous_branch_or_revision, clean_state=True)
            logger.info("Rebased pull request", pr_number=pr_number, base=full_base_ref)
            return 0
    except Exception:
        git.checkout(previous_branch_or_revision, clean_state=True)
        raise

    error("Rebase was unable to complete automatically without conflicts.")
    if not is_ci and prompt_confirm("Manually complete rebase?", default=True):
        info("After manually completing rebase, run the following command to update PR:")
        info(f" $ git push {pull_request.head_ref.repository.url} HEAD:{pull_request.head_ref.name} {force_with_lease_flag}")
        info()
        info("To abort the rebase and return to the state of the repository before this command")
        info("run the following command:")
        info(f" $ git rebase --abort && git reset --hard && git checkout {previous_branch_or_revision}")
        return 1

    info(red("Cleaning up git state, and restoring previous state."))
    git.checkout(previous_branch_or_revision, clean_state=True)
    return 1
