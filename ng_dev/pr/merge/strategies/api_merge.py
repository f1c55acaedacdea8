"""Merge strategy using the GitHub API so pull requests show up as merged."""

import structlog
import typer

from ng_dev.commit_message.parse import parse_commit_message
from ng_dev.configuration.models import GithubApiMergeConfig, MergeMethod
from ng_dev.github.abc import GitHubClientBase
from ng_dev.github.exceptions import GithubApiRequestError
from ng_dev.pr.common.failures import PullRequestFailure
from ng_dev.pr.merge.pull_request import PullRequest
from ng_dev.pr.merge.strategies.base import MergeStrategy
from ng_dev.utils.constants import TEMP_PR_HEAD_BRANCH
from ng_dev.utils.git_client import GitClient
from ng_dev.utils.helpers import has_matching_label

logger = structlog.get_logger(__name__)

COMMIT_HEADER_SEPARATOR = "\n\n"


class GithubApiMergeStrategy(MergeStrategy):
    """Merges a pull request into its GitHub base branch through the API.

    The merged commits are cherry-picked into the remaining target branches locally.
    Pull requests merged this way cannot use fixup or squash commits.
    """

    def __init__(self, git: GitClient, github: GitHubClientBase, config: GithubApiMergeConfig) -> None:
        super().__init__(git)
        self.github = github
        self.config = config

    async def merge(self, pull_request: PullRequest) -> None:
        github_target_branch = pull_request.github_target_branch
        target_branches = pull_request.target_branches

        if github_target_branch not in target_branches:
            raise PullRequestFailure.mismatching_target_branch(target_branches)

        if pull_request.required_base_sha and not self.git.has_commit(TEMP_PR_HEAD_BRANCH, pull_request.required_base_sha):
            raise PullRequestFailure.unsatisfied_base_sha()

        method = self.get_merge_method(pull_request)
        cherry_pick_target_branches = [branch for branch in target_branches if branch != github_target_branch]

        # A dry-run cherry-pick makes sure the API merge is not followed by conflicts in other branches.
        failed_branches = self.cherry_pick_into_target_branches(
            self.get_pull_request_revision_range(pull_request), cherry_pick_target_branches, dry_run=True
        )
        if failed_branches:
            raise PullRequestFailure.merge_conflicts(failed_branches)

        commit_title: str | None = None
        commit_message: str | None = None
        if pull_request.needs_commit_message_fixup:
            # The API only allows modifying the commit message of squash merges.
            if method != MergeMethod.SQUASH:
                raise PullRequestFailure.unable_to_fixup_commit_message_squash_only()
            commit_title, commit_message = await self.prompt_commit_message_edit(pull_request)

        try:
            target_sha = await self.github.merge_pull_request(pull_request.pr_number, method.value, commit_title, commit_message)
        except GithubApiRequestError as exc:
            # GitHub answers 404 for tokens with insufficient permissions to not leak private repositories.
            if exc.status_code in (403, 404):
                raise PullRequestFailure.insufficient_permissions_to_merge() from exc
            if exc.status_code == 405:
                raise PullRequestFailure.merge_conflicts([github_target_branch]) from exc
            raise PullRequestFailure.unknown_merge_error() from exc
        self.pushed_branches.append(github_target_branch)

        if not cherry_pick_target_branches:
            return

        # Refresh the branch merged through the API so its new commits can be cherry-picked.
        self.fetch_target_branches([github_target_branch])
        target_commits_count = 1 if method == MergeMethod.SQUASH else pull_request.commit_count
        failed_branches = self.cherry_pick_into_target_branches(
            f"{target_sha}~{target_commits_count}..{target_sha}",
            cherry_pick_target_branches,
            link_to_original_commits=True,
        )
        if failed_branches:
            raise PullRequestFailure.merge_conflicts(failed_branches)

        failed_pushes = self.push_target_branches_upstream(cherry_pick_target_branches)
        if failed_pushes:
            raise PullRequestFailure.merge_conflicts(failed_pushes)

    def get_merge_method(self, pull_request: PullRequest) -> MergeMethod:
        """Determines the merge method from the labels of the pull request."""
        for label_config in self.config.labels:
            if has_matching_label(pull_request.labels, label_config.pattern):
                return label_config.method
        return self.config.default

    async def prompt_commit_message_edit(self, pull_request: PullRequest) -> tuple[str, str]:
        """Opens an editor for the squash commit message and returns its title and body."""
        default_message = await self.get_default_squash_commit_message(pull_request)
        result = typer.edit(default_message) or default_message
        new_title, _, new_message = result.partition(COMMIT_HEADER_SEPARATOR)
        return f"{new_title} (#{pull_request.pr_number})", new_message

    async def get_default_squash_commit_message(self, pull_request: PullRequest) -> str:
        """Builds the message GitHub would use when squash merging the pull request."""
        messages = await self.github.list_pull_request_commit_messages(pull_request.pr_number)
        message_base = f"{pull_request.title}{COMMIT_HEADER_SEPARATOR}"
        if len(messages) <= 1:
            body = parse_commit_message(messages[0]).body if messages else ""
            return f"{message_base}{body}"
        return message_base + COMMIT_HEADER_SEPARATOR.join(f"* {message}" for message in messages)
