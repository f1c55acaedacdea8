"""Merges a pull request into its target branches using the configured merge strategy."""

from dataclasses import dataclass, field
from enum import Enum

import structlog

from ng_dev.configuration.models import NgDevConfig, PullRequestConfig
from ng_dev.github.abc import GitHubClientBase
from ng_dev.npm.registry import NpmRegistryClientBase
from ng_dev.pr.common.failures import PullRequestFailure
from ng_dev.pr.common.validation import PullRequestValidationConfig
from ng_dev.pr.merge.messages import get_caretaker_note_prompt_message, get_targeted_branches_confirmation_prompt_message
from ng_dev.pr.merge.pull_request import load_and_validate_pull_request
from ng_dev.pr.merge.strategies.api_merge import GithubApiMergeStrategy
from ng_dev.pr.merge.strategies.autosquash import AutosquashMergeStrategy
from ng_dev.pr.merge.strategies.base import MergeStrategy
from ng_dev.utils.console import prompt_confirm
from ng_dev.utils.constants import GITHUB_TOKEN_GENERATE_URL, GITHUB_TOKEN_SETTINGS_URL
from ng_dev.utils.git_client import GitClient, GitCommandError

logger = structlog.get_logger(__name__)


class MergeStatus(str, Enum):
    """Outcome of merging a pull request."""

    UNKNOWN_GIT_ERROR = "unknown_git_error"
    DIRTY_WORKING_DIR = "dirty_working_dir"
    UNEXPECTED_SHALLOW_REPO = "unexpected_shallow_repo"
    SUCCESS = "success"
    FAILED = "failed"
    USER_ABORTED = "user_aborted"
    GITHUB_ERROR = "github_error"


@dataclass
class MergeResult:
    """Result of a merge attempt, with the branches that were and were not pushed."""

    status: MergeStatus
    failure: PullRequestFailure | None = None
    pushed_branches: list[str] = field(default_factory=list)
    failed_branches: list[str] = field(default_factory=list)


class MergeTool:
    """Merges pull requests after validating them and asking for confirmation."""

    def __init__(
        self,
        git: GitClient,
        github: GitHubClientBase,
        registry: NpmRegistryClientBase,
        config: NgDevConfig,
        branch_prompt: bool = True,
        is_private_repo: bool = False,
    ) -> None:
        self.git = git
        self.github = github
        self.registry = registry
        self.config = config
        self.branch_prompt = branch_prompt
        self.is_private_repo = is_private_repo
        # Details of the last failed token scope check, printed by the CLI.
        self.missing_scopes_message: str | None = None

    @property
    def pull_request_config(self) -> PullRequestConfig:
        return self.config.pull_request or PullRequestConfig()

    async def merge(self, pr_number: int, force: bool = False) -> MergeResult:
        """Merges the given pull request and pushes it upstream.

        When ``force`` is set, non-fatal validation failures are ignored. The previously
        checked out branch is restored and temporary branches are deleted afterwards,
        regardless of the outcome.
        """
        if self.git.has_uncommitted_changes():
            return MergeResult(MergeStatus.DIRTY_WORKING_DIR)
        if self.git.is_shallow_repo():
            return MergeResult(MergeStatus.UNEXPECTED_SHALLOW_REPO)

        missing_scopes = await self.get_missing_token_scopes()
        if missing_scopes:
            self.missing_scopes_message = (
                "The provided <TOKEN> does not have required permissions due to missing scope(s): "
                f"{', '.join(missing_scopes)}\n\n"
                f"Update the token in use at:\n  {GITHUB_TOKEN_SETTINGS_URL}\n\n"
                f"Alternatively, a new token can be created at: {GITHUB_TOKEN_GENERATE_URL}\n"
            )
            return MergeResult(MergeStatus.GITHUB_ERROR)

        try:
            pull_request = await load_and_validate_pull_request(
                self.github,
                self.registry,
                self.config,
                pr_number,
                PullRequestValidationConfig(),
                ignore_non_fatal_failures=force,
            )
        except PullRequestFailure as failure:
            return MergeResult(MergeStatus.FAILED, failure)

        for ignored in pull_request.ignored_failures:
            logger.warning("Ignoring pull request validation failure", kind=ignored.kind.value, failure=ignored.message)

        if self.branch_prompt and not prompt_confirm(get_targeted_branches_confirmation_prompt_message(pull_request)):
            return MergeResult(MergeStatus.USER_ABORTED)

        if pull_request.has_caretaker_note and not prompt_confirm(get_caretaker_note_prompt_message(pull_request)):
            return MergeResult(MergeStatus.USER_ABORTED)

        strategy = self.create_strategy()
        previous_branch_or_revision = self.git.get_current_branch_or_revision()
        try:
            await strategy.prepare(pull_request)
            await strategy.merge(pull_request)
            logger.info("Merged pull request", pr_number=pr_number, branches=strategy.pushed_branches)
            return MergeResult(MergeStatus.SUCCESS, pushed_branches=strategy.pushed_branches)
        except PullRequestFailure as failure:
            return MergeResult(MergeStatus.FAILED, failure, strategy.pushed_branches, strategy.failed_branches)
        except GitCommandError as exc:
            logger.error("Git command failed while merging", args=exc.args_list, status=exc.status)
            return MergeResult(
                MergeStatus.UNKNOWN_GIT_ERROR, pushed_branches=strategy.pushed_branches, failed_branches=strategy.failed_branches
            )
        finally:
            self.git.run_graceful(["checkout", "-f", previous_branch_or_revision])
            await strategy.cleanup(pull_request)

    def create_strategy(self) -> MergeStrategy:
        """Creates the merge strategy selected by the pull request configuration."""
        api_merge_config = self.pull_request_config.github_api_merge
        if api_merge_config is not None:
            return GithubApiMergeStrategy(self.git, self.github, api_merge_config)
        return AutosquashMergeStrategy(self.git, self.github)

    async def get_missing_token_scopes(self) -> list[str]:
        """Gets the OAuth scopes the token needs for merging but does not have.

        Tokens without scope information, like fine-grained or app tokens, are not checked.
        """
        scopes = await self.github.get_token_scopes()
        if scopes is None:
            return []
        missing: list[str] = []
        if self.is_private_repo:
            if "repo" not in scopes:
                missing.append("repo")
        elif "repo" not in scopes and "public_repo" not in scopes:
            missing.append("public_repo")
        # Pushing commits that modify workflow files requires the workflow scope.
        if "workflow" not in scopes:
            missing.append("workflow")
        return missing
