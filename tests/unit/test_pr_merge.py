"""Unit tests for merging pull requests."""

import io
import subprocess
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from pytest import MonkeyPatch

from ng_dev.configuration.models import GithubApiMergeConfig, GithubConfig, NgDevConfig, PullRequestConfig
from ng_dev.pr.common.checkout import UnexpectedLocalChangesError, check_out_pull_request_locally
from ng_dev.pr.common.failures import PullRequestFailure
from ng_dev.pr.merge.pull_request import PullRequest
from ng_dev.pr.merge.strategies.api_merge import GithubApiMergeStrategy
from ng_dev.pr.merge.strategies.autosquash import AutosquashMergeStrategy, get_commit_message_filter_command
from ng_dev.pr.merge.strategies.base import MergeStrategy
from ng_dev.pr.merge.strategies.commit_message_filter import main, rewrite_commit_message
from ng_dev.pr.merge.task import MergeStatus, MergeTool


def completed(returncode: int = 0, stdout: str = "") -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(args=["git"], returncode=returncode, stdout=stdout, stderr="")


def make_git() -> MagicMock:
    """Create a git client for a clean, non-shallow repository on main."""
    git = MagicMock()
    git.has_uncommitted_changes.return_value = False
    git.is_shallow_repo.return_value = False
    git.get_current_branch_or_revision.return_value = "main"
    git.get_repo_git_url.return_value = "https://github.com/angular/angular.git"
    git.main_branch_name = "main"
    git.run_graceful.return_value = completed()
    return git


def make_pull_request(target_branches: list[str]) -> PullRequest:
    return PullRequest(
        url="https://github.com/angular/angular/pull/1",
        pr_number=1,
        title="fix(core): fix a bug",
        labels=["target: patch"],
        github_target_branch="main",
        target_branches=target_branches,
        commit_count=1,
    )


class PushingStrategy(MergeStrategy):
    """Merge strategy that only pushes the target branches."""

    async def merge(self, pull_request: PullRequest) -> None:
        failed = self.push_target_branches_upstream(pull_request.target_branches)
        if failed:
            raise PullRequestFailure.merge_conflicts(failed)


def make_config() -> NgDevConfig:
    return NgDevConfig(github=GithubConfig(owner="angular", name="angular"), pull_request=PullRequestConfig())


@pytest.mark.asyncio
async def test_merge_dirty_working_dir_makes_no_requests() -> None:
    """Test that uncommitted changes abort the merge before any request."""
    git = make_git()
    git.has_uncommitted_changes.return_value = True
    github = MagicMock()
    github.get_token_scopes = AsyncMock()
    result = await MergeTool(git, github, MagicMock(), make_config(), branch_prompt=False).merge(1)
    assert result.status == MergeStatus.DIRTY_WORKING_DIR
    github.get_token_scopes.assert_not_awaited()


@pytest.mark.asyncio
async def test_merge_shallow_repo() -> None:
    """Test that shallow clones cannot be used for merging."""
    git = make_git()
    git.is_shallow_repo.return_value = True
    result = await MergeTool(git, MagicMock(), MagicMock(), make_config(), branch_prompt=False).merge(1)
    assert result.status == MergeStatus.UNEXPECTED_SHALLOW_REPO


@pytest.mark.asyncio
async def test_merge_missing_token_scopes() -> None:
    """Test that a token without the required scopes is reported."""
    github = MagicMock()
    github.get_token_scopes = AsyncMock(return_value=["read:org"])
    tool = MergeTool(make_git(), github, MagicMock(), make_config(), branch_prompt=False)
    result = await tool.merge(1)
    assert result.status == MergeStatus.GITHUB_ERROR
    assert tool.missing_scopes_message is not None
    assert "public_repo, workflow" in tool.missing_scopes_message


@pytest.mark.asyncio
async def test_merge_validation_failure(monkeypatch: MonkeyPatch) -> None:
    """Test that validation failures are returned as failed merge results."""
    github = MagicMock()
    github.get_token_scopes = AsyncMock(return_value=None)
    failure = PullRequestFailure.not_merge_ready()
    monkeypatch.setattr("ng_dev.pr.merge.task.load_and_validate_pull_request", AsyncMock(side_effect=failure))
    result = await MergeTool(make_git(), github, MagicMock(), make_config(), branch_prompt=False).merge(1)
    assert result.status == MergeStatus.FAILED
    assert result.failure is failure


@pytest.mark.asyncio
async def test_merge_push_failure_keeps_pushed_branches_and_restores_state(monkeypatch: MonkeyPatch) -> None:
    """Test that a failed push reports pushed and failed branches and restores the repository."""
    git = make_git()
    push_results = iter([completed(0), completed(1)])

    def run_graceful(args: list[str], env: Any = None) -> subprocess.CompletedProcess[str]:
        if args[0] == "push":
            return next(push_results)
        return completed()

    git.run_graceful.side_effect = run_graceful
    github = MagicMock()
    github.get_token_scopes = AsyncMock(return_value=None)
    monkeypatch.setattr(
        "ng_dev.pr.merge.task.load_and_validate_pull_request", AsyncMock(return_value=make_pull_request(["main", "10.2.x"]))
    )
    tool = MergeTool(git, github, MagicMock(), make_config(), branch_prompt=False)
    strategy = PushingStrategy(git)
    monkeypatch.setattr(tool, "create_strategy", lambda: strategy)

    result = await tool.merge(1)

    assert result.status == MergeStatus.FAILED
    assert result.pushed_branches == ["main"]
    assert result.failed_branches == ["10.2.x"]
    assert "10.2.x" in result.failure.message  # type: ignore[union-attr]
    git.run_graceful.assert_any_call(["checkout", "-f", "main"])
    git.run_graceful.assert_any_call(["branch", "-D", "merge_pr_head"])


@pytest.mark.asyncio
async def test_merge_aborted_by_user(monkeypatch: MonkeyPatch) -> None:
    """Test that declining the branch confirmation aborts the merge."""
    github = MagicMock()
    github.get_token_scopes = AsyncMock(return_value=None)
    monkeypatch.setattr("ng_dev.pr.merge.task.load_and_validate_pull_request", AsyncMock(return_value=make_pull_request(["main"])))
    monkeypatch.setattr("ng_dev.pr.merge.task.prompt_confirm", lambda message: False)
    result = await MergeTool(make_git(), github, MagicMock(), make_config(), branch_prompt=True).merge(1)
    assert result.status == MergeStatus.USER_ABORTED


def test_create_strategy_from_config() -> None:
    """Test that the GitHub API strategy is used when configured."""
    tool = MergeTool(make_git(), MagicMock(), MagicMock(), make_config())
    assert isinstance(tool.create_strategy(), AutosquashMergeStrategy)
    api_config = NgDevConfig(
        github=GithubConfig(owner="angular", name="angular"),
        pull_request=PullRequestConfig(github_api_merge=GithubApiMergeConfig()),
    )
    assert isinstance(MergeTool(make_git(), MagicMock(), MagicMock(), api_config).create_strategy(), GithubApiMergeStrategy)


def test_cherry_pick_aborts_failed_branches() -> None:
    """Test that failed cherry-picks are aborted and reported per branch."""
    git = make_git()
    git.run_graceful.side_effect = lambda args, env=None: completed(1 if args[0] == "cherry-pick" and args[1] != "--abort" else 0)
    strategy = PushingStrategy(git)
    failed = strategy.cherry_pick_into_target_branches("base..head", ["main", "10.2.x"])
    assert failed == ["main", "10.2.x"]
    git.run_graceful.assert_any_call(["cherry-pick", "--abort"])


def test_local_target_branch_name() -> None:
    """Test that slashes in branch names are replaced."""
    assert PushingStrategy(make_git()).get_local_target_branch_name("feature/x") == "merge_pr_target_feature_x"


def test_rewrite_commit_message() -> None:
    """Test that the pull request number and close trailer are added once."""
    rewritten = rewrite_commit_message("fix(core): fix a bug\n\nBody text.\n", 42)
    assert rewritten == "fix(core): fix a bug (#42)\n\nBody text.\n\nPR Close #42\n"
    assert rewrite_commit_message(rewritten, 42) == rewritten


def test_commit_message_filter_command() -> None:
    """Test that the filter runs the message filter module for the pull request."""
    assert get_commit_message_filter_command(42).endswith("-m ng_dev.pr.merge.strategies.commit_message_filter 42")


@pytest.mark.asyncio
async def test_checkout_with_local_changes_makes_no_requests() -> None:
    """Test that local changes prevent checking out a pull request before any request."""
    git = make_git()
    git.has_uncommitted_changes.return_value = True
    github = MagicMock()
    github.graphql = AsyncMock()
    with pytest.raises(UnexpectedLocalChangesError):
        await check_out_pull_request_locally(git, github, 1)
    github.graphql.assert_not_awaited()


def test_commit_message_filter_main(monkeypatch: MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    """Test that the filter rewrites the message read from stdin."""
    monkeypatch.setattr("sys.stdin", io.StringIO("fix(core): fix a bug\n"))
    main(["commit_message_filter", "7"])
    assert capsys.readouterr().out == "fix(core): fix a bug (#7)\n\nPR Close #7\n"
