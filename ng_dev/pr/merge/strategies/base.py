"""Base class for strategies merging a pull request into its target branches."""

from abc import ABC, abstractmethod

import structlog

from ng_dev.pr.merge.pull_request import PullRequest
from ng_dev.utils.constants import TEMP_PR_HEAD_BRANCH
from ng_dev.utils.git_client import GitClient

logger = structlog.get_logger(__name__)


class MergeStrategy(ABC):
    """Merges a pull request into its target branches.

    The pull request head and all target branches are fetched into temporary local
    branches. Target branches are pushed one by one, so a failed push leaves the
    branches pushed before it merged.
    """

    def __init__(self, git: GitClient) -> None:
        self.git = git
        self.pushed_branches: list[str] = []
        self.failed_branches: list[str] = []

    async def prepare(self, pull_request: PullRequest) -> None:
        """Fetches the target branches and the head of the pull request."""
        self.fetch_target_branches(pull_request.target_branches, f"pull/{pull_request.pr_number}/head:{TEMP_PR_HEAD_BRANCH}")

    @abstractmethod
    async def merge(self, pull_request: PullRequest) -> None:
        """Merges the pull request into its target branches and pushes them upstream.

        Raises:
            PullRequestFailure: If the pull request could not be merged.
            GitCommandError: If an unexpected git command failed.
        """
        pass

    async def cleanup(self, pull_request: PullRequest) -> None:
        """Deletes the temporary local branches."""
        for branch_name in pull_request.target_branches:
            self.git.run_graceful(["branch", "-D", self.get_local_target_branch_name(branch_name)])
        self.git.run_graceful(["branch", "-D", TEMP_PR_HEAD_BRANCH])

    def get_pull_request_base_revision(self, pull_request: PullRequest) -> str:
        """Gets the revision the pull request is based on."""
        return f"{TEMP_PR_HEAD_BRANCH}~{pull_request.commit_count}"

    def get_pull_request_revision_range(self, pull_request: PullRequest) -> str:
        """Gets the revision range of all commits in the pull request."""
        return f"{self.get_pull_request_base_revision(pull_request)}..{TEMP_PR_HEAD_BRANCH}"

    def get_local_target_branch_name(self, target_branch: str) -> str:
        """Gets the name of the temporary local branch for a target branch."""
        return f"merge_pr_target_{target_branch.replace('/', '_')}"

    def cherry_pick_into_target_branches(
        self,
        revision_range: str,
        target_branches: list[str],
        dry_run: bool = False,
        link_to_original_commits: bool = False,
    ) -> list[str]:
        """Cherry-picks the revision range into the local target branches.

        Returns:
            The target branches the revisions could not be cherry-picked into.
        """
        cherry_pick_args = [revision_range]
        if dry_run:
            # Changes are applied to the working tree only and discarded afterwards.
            cherry_pick_args.append("--no-commit")
        if link_to_original_commits:
            cherry_pick_args.append("-x")

        failed_branches: list[str] = []
        for branch_name in target_branches:
            self.git.run(["checkout", self.get_local_target_branch_name(branch_name)])
            if self.git.run_graceful(["cherry-pick", *cherry_pick_args]).returncode != 0:
                # Git keeps a failed cherry-pick in progress, which would block later merges.
                self.git.run_graceful(["cherry-pick", "--abort"])
                failed_branches.append(branch_name)
            if dry_run:
                self.git.run(["reset", "--hard", "HEAD"])
        return failed_branches

    def fetch_target_branches(self, names: list[str], *extra_refspecs: str) -> None:
        """Fetches the target branches, and any extra refspecs, with a single fetch."""
        refspecs = [f"refs/heads/{name}:{self.get_local_target_branch_name(name)}" for name in names]
        self.git.run(["fetch", "-q", "-f", self.git.get_repo_git_url(), *refspecs, *extra_refspecs])

    def push_target_branches_upstream(self, names: list[str]) -> list[str]:
        """Pushes the local target branches upstream, one branch at a time.

        Returns:
            The branches that failed to push.
        """
        failed: list[str] = []
        for name in names:
            refspec = f"{self.get_local_target_branch_name(name)}:refs/heads/{name}"
            result = self.git.run_graceful(["push", self.git.get_repo_git_url(), refspec])
            if result.returncode == 0:
                logger.info("Pushed target branch", branch=name)
                self.pushed_branches.append(name)
            else:
                logger.warning("Failed to push target branch", branch=name, status=result.returncode)
                self.failed_branches.append(name)
                failed.append(name)
        return failed
