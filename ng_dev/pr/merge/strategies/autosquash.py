"""Merge strategy rebasing the pull request locally with autosquash enabled."""

import shlex
import sys

import structlog

from ng_dev.github.abc import GitHubClientBase
from ng_dev.pr.common.failures import PullRequestFailure
from ng_dev.pr.merge.pull_request import PullRequest
from ng_dev.pr.merge.strategies.base import MergeStrategy
from ng_dev.utils.constants import TEMP_PR_HEAD_BRANCH
from ng_dev.utils.git_client import GitClient

logger = structlog.get_logger(__name__)


def get_commit_message_filter_command(pr_number: int) -> str:
    """Gets the ``--msg-filter`` command rewriting commit messages for the pull request."""
    return f"{shlex.quote(sys.executable)} -m ng_dev.pr.merge.strategies.commit_message_filter {pr_number}"


class AutosquashMergeStrategy(MergeStrategy):
    """Merges pull requests without the GitHub API.

    The pull request is rebased locally with autosquash, so fixup and squash commits are
    collapsed, and then cherry-picked into every target branch. GitHub does not show such
    pull requests as merged because the merges are not fast-forwards.
    """

    def __init__(self, git: GitClient, github: GitHubClientBase) -> None:
        super().__init__(git)
        self.github = github

    async def merge(self, pull_request: PullRequest) -> None:
        pr_number = pull_request.pr_number
        target_branches = pull_request.target_branches

        # Enforces that PRs are rebased on top of a given commit, e.g. one changing code ownership.
        if pull_request.required_base_sha and not self.git.has_commit(TEMP_PR_HEAD_BRANCH, pull_request.required_base_sha):
            raise PullRequestFailure.unsatisfied_base_sha()

        # The autosquash rebase can change the number of commits, so the base is fixed to a SHA first.
        base_sha = self.git.run(["rev-parse", self.get_pull_request_base_revision(pull_request)]).stdout.strip()
        revision_range = f"{base_sha}..{TEMP_PR_HEAD_BRANCH}"

        # Autosquash only works for interactive rebases. Unless the commit message needs a fixup,
        # GIT_SEQUENCE_EDITOR makes the rebase non-interactive for the caretaker.
        branch_or_revision_before_rebase = self.git.get_current_branch_or_revision()
        rebase_env = None if pull_request.needs_commit_message_fixup else {"GIT_SEQUENCE_EDITOR": "true"}
        self.git.run(["rebase", "--interactive", "--autosquash", base_sha, TEMP_PR_HEAD_BRANCH], env=rebase_env)

        # filter-branch relies on the working tree, so it runs from the initial branch.
        self.git.run(["checkout", "-f", branch_or_revision_before_rebase])
        self.git.run(["filter-branch", "-f", "--msg-filter", get_commit_message_filter_command(pr_number), revision_range])

        failed_branches = self.cherry_pick_into_target_branches(revision_range, target_branches)
        if failed_branches:
            raise PullRequestFailure.merge_conflicts(failed_branches)

        failed_pushes = self.push_target_branches_upstream(target_branches)
        if failed_pushes:
            raise PullRequestFailure.merge_conflicts(failed_pushes)

        # GitHub only closes PRs automatically for pushes to the default branch.
        if pull_request.github_target_branch != self.git.main_branch_name:
            local_branch = self.get_local_target_branch_name(pull_request.github_target_branch)
            sha = self.git.run(["rev-parse", local_branch]).stdout.strip()
            await self.github.post_comment(pr_number, f"Closed by commit {sha}")
            await self.github.close_pull_request(pr_number)
            logger.info("Closed pull request merged into non-default branch", pr_number=pr_number, sha=sha)
