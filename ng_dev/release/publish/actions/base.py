"""Base class for release actions selectable in the interactive release tool."""

import asyncio
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

import structlog

from ng_dev.configuration.models import GithubConfig, ReleaseConfig
from ng_dev.github.abc import GitHubClientBase
from ng_dev.npm.publish import run_npm_publish
from ng_dev.npm.registry import NpmRegistryClientBase
from ng_dev.release.build import BuiltPackage
from ng_dev.release.notes.release_notes import ReleaseNotes
from ng_dev.release.publish.actions_error import FatalReleaseActionError, UserAbortedReleaseActionError
from ng_dev.release.publish.commit_message import (
    get_commit_message_for_release,
    get_release_note_cherry_pick_commit_message,
)
from ng_dev.release.publish.external_commands import invoke_release_build_command, invoke_yarn_install_command
from ng_dev.release.publish.pull_request_state import get_pull_request_state
from ng_dev.release.versioning import ActiveReleaseTrains, SemVer
from ng_dev.utils.child_process import CommandFailedError
from ng_dev.utils.console import error, green, info, prompt_confirm, red, warn, yellow
from ng_dev.utils.constants import (
    CHANGELOG_FILE_PATH,
    GITHUB_URL,
    WAIT_FOR_MERGE_INTERVAL_SECONDS,
    WAIT_FOR_MERGE_MAX_ATTEMPTS,
)
from ng_dev.utils.git_client import GitClient

logger = structlog.get_logger(__name__)

PACKAGE_JSON_PATH = "package.json"
"""Location of the project's top-level ``package.json``, relative to the repository root."""

FIND_OWNED_FORKS_OF_REPO_QUERY = """
query($owner: String!, $name: String!) {
  repository(owner: $owner, name: $name) {
    forks(affiliations: OWNER, first: 1) {
      nodes {
        owner {
          login
        }
        name
      }
    }
  }
}
"""


@dataclass(frozen=True)
class Repository:
    """A GitHub repository."""

    owner: str
    name: str


@dataclass(frozen=True)
class PullRequest:
    """A pull request created by a release action."""

    number: int
    url: str
    fork: Repository
    fork_branch: str


@dataclass(frozen=True)
class StagedRelease:
    """The release notes and staging pull request of a staged version."""

    release_notes: ReleaseNotes
    pull_request: PullRequest


class ReleaseAction(ABC):
    """A release action the caretaker can select when it is active.

    Actions stage releases, bump versions, cherry-pick the changelog or branch off from the
    next branch. Failures are printed before raising FatalReleaseActionError.
    """

    def __init__(
        self,
        active: ActiveReleaseTrains,
        git: GitClient,
        github: GitHubClientBase,
        registry: NpmRegistryClientBase,
        github_config: GithubConfig,
        config: ReleaseConfig,
        project_dir: Path,
    ) -> None:
        self.active = active
        self.git = git
        self.github = github
        self.registry = registry
        self.github_config = github_config
        self.config = config
        self.project_dir = project_dir
        self._cached_fork_repo: Repository | None = None

    @classmethod
    @abstractmethod
    async def is_active(cls, active: ActiveReleaseTrains, config: ReleaseConfig, registry: NpmRegistryClientBase) -> bool:
        """Whether the action can currently be performed."""
        pass

    @abstractmethod
    async def get_description(self) -> str:
        """Gets the description shown when the caretaker selects a release action."""
        pass

    @abstractmethod
    async def perform(self) -> None:
        """Performs the release action.

        Raises:
            FatalReleaseActionError: If the action failed.
            UserAbortedReleaseActionError: If the caretaker aborted the action.
        """
        pass

    def get_project_version(self) -> SemVer:
        """Reads the version from the project's ``package.json``."""
        package_json = json.loads((self.project_dir / PACKAGE_JSON_PATH).read_text())
        return SemVer.parse(package_json["version"])

    def update_project_version(self, new_version: SemVer) -> None:
        """Writes the new version into the project's ``package.json``."""
        package_json_path = self.project_dir / PACKAGE_JSON_PATH
        package_json = json.loads(package_json_path.read_text())
        package_json["version"] = new_version.format()
        # Trailing new line to match what editors write.
        package_json_path.write_text(json.dumps(package_json, indent=2) + "\n")
        info(green(f"  ✓   Updated project version to {package_json['version']}"))

    async def get_latest_commit_of_branch(self, branch_name: str) -> str:
        return await self.github.get_ref_sha(f"heads/{branch_name}")

    async def verify_passing_github_status(self, branch_name: str) -> None:
        """Verifies the latest commit of the branch passes all statuses, unless the caretaker ignores it.

        Raises:
            UserAbortedReleaseActionError: If the status is not passing and not ignored.
        """
        commit_sha = await self.get_latest_commit_of_branch(branch_name)
        state = await self.github.get_combined_status(commit_sha)
        branch_commits_url = f"{GITHUB_URL}/{self.github_config.owner}/{self.github_config.name}/commits/{branch_name}"

        if state == "failure":
            error(
                red(
                    f'  ✘   Cannot stage release. Commit "{commit_sha}" does not pass all github '
                    "status checks. Please make sure this commit passes all checks before re-running."
                )
            )
            error(f"      Please have a look at: {branch_commits_url}")
            if prompt_confirm("Do you want to ignore the Github status and proceed?"):
                info(yellow("  ⚠   Upstream commit is failing CI checks, but status has been forcibly ignored."))
                return
            raise UserAbortedReleaseActionError()
        if state == "pending":
            error(red(f'  ✘   Commit "{commit_sha}" still has pending github statuses that need to succeed before staging a release.'))
            error(red(f"      Please have a look at: {branch_commits_url}"))
            if prompt_confirm("Do you want to ignore the Github status and proceed?"):
                info(yellow("  ⚠   Upstream commit is pending CI, but status has been forcibly ignored."))
                return
            raise UserAbortedReleaseActionError()
        info(green("  ✓   Upstream commit is passing all github status checks."))

    def wait_for_edits_and_create_release_commit(self, new_version: SemVer) -> None:
        """Lets the caretaker edit the changelog, then commits the version bump and changelog.

        Raises:
            UserAbortedReleaseActionError: If the caretaker does not want to proceed.
        """
        info(
            yellow(
                "  ⚠   Please review the changelog and ensure that the log contains only changes "
                "that apply to the public API surface. Manual changes can be made. When done, please "
                "proceed with the prompt below."
            )
        )
        if not prompt_confirm("Do you want to proceed and commit the changes?"):
            raise UserAbortedReleaseActionError()
        self.create_commit(get_commit_message_for_release(new_version), [PACKAGE_JSON_PATH, CHANGELOG_FILE_PATH])
        info(green(f'  ✓   Created release commit for: "{new_version}".'))

    async def get_fork_of_authenticated_user(self) -> Repository:
        """Gets the fork of the upstream repository owned by the authenticated user.

        Raises:
            FatalReleaseActionError: If the user has no fork.
        """
        if self._cached_fork_repo is not None:
            return self._cached_fork_repo
        owner, name = self.github_config.owner, self.github_config.name
        data = await self.github.graphql(FIND_OWNED_FORKS_OF_REPO_QUERY, {"owner": owner, "name": name})
        forks = data["repository"]["forks"]["nodes"]
        if not forks:
            error(red("  ✘   Unable to find fork for currently authenticated user."))
            error(red(f"      Please ensure you created a fork of: {owner}/{name}."))
            raise FatalReleaseActionError()
        self._cached_fork_repo = Repository(owner=forks[0]["owner"]["login"], name=forks[0]["name"])
        return self._cached_fork_repo

    async def find_available_branch_name(self, repo: Repository, base_name: str) -> str:
        """Finds a branch name in the repository that is not taken yet, based on the given name."""
        current_name = base_name
        suffix = 0
        while await self.github.branch_exists(repo.owner, repo.name, current_name):
            suffix += 1
            current_name = f"{base_name}_{suffix}"
        return current_name

    def create_local_branch_from_head(self, branch_name: str) -> None:
        """Creates a local branch from HEAD, overwriting an existing branch of the same name."""
        self.git.run(["checkout", "-q", "-B", branch_name])

    def push_head_to_remote_branch(self, branch_name: str) -> None:
        """Pushes HEAD to a branch of the upstream repository."""
        self.git.run(["push", "-q", self.git.get_repo_git_url(), f"HEAD:refs/heads/{branch_name}"])

    async def push_head_to_fork(self, proposed_branch_name: str, track_local_branch: bool) -> tuple[Repository, str]:
        """Pushes HEAD to a new branch in the fork of the authenticated user.

        Returns:
            The fork and the name of the branch the changes were pushed to.
        """
        fork = await self.get_fork_of_authenticated_user()
        if self.github_config.use_ssh:
            fork_git_url = f"git@github.com:{fork.owner}/{fork.name}.git"
        else:
            fork_git_url = self.git.add_token_to_url(f"{GITHUB_URL}/{fork.owner}/{fork.name}.git")
        branch_name = await self.find_available_branch_name(fork, proposed_branch_name)
        push_args: list[str] = []
        if track_local_branch:
            self.create_local_branch_from_head(branch_name)
            push_args.append("--set-upstream")
        self.git.run(["push", "-q", fork_git_url, f"HEAD:refs/heads/{branch_name}", *push_args])
        return fork, branch_name

    async def push_changes_to_fork_and_create_pull_request(
        self, target_branch: str, proposed_fork_branch_name: str, title: str, body: str | None = None
    ) -> PullRequest:
        """Pushes HEAD to the fork of the authenticated user and opens a pull request upstream."""
        repo_slug = f"{self.github_config.owner}/{self.github_config.name}"
        fork, branch_name = await self.push_head_to_fork(proposed_fork_branch_name, True)
        created = await self.github.create_pull_request(title=title, head=f"{fork.owner}:{branch_name}", base=target_branch, body=body)
        if self.config.release_pr_labels:
            await self.github.add_labels(created.number, self.config.release_pr_labels)
        info(green(f"  ✓   Created pull request #{created.number} in {repo_slug}."))
        return PullRequest(number=created.number, url=created.html_url, fork=fork, fork_branch=branch_name)

    async def wait_for_pull_request_to_be_merged(
        self,
        pull_request: PullRequest,
        interval: float = WAIT_FOR_MERGE_INTERVAL_SECONDS,
        max_attempts: int = WAIT_FOR_MERGE_MAX_ATTEMPTS,
    ) -> None:
        """Polls GitHub until the pull request is merged.

        Raises:
            UserAbortedReleaseActionError: If the pull request was closed without being merged.
            FatalReleaseActionError: If the pull request was not merged after all attempts.
        """
        logger.debug("Waiting for pull request to be merged", pr_number=pull_request.number)
        info(f"Waiting for pull request #{pull_request.number} to be merged.")
        for _ in range(max_attempts):
            await asyncio.sleep(interval)
            state = await get_pull_request_state(self.github, pull_request.number)
            if state == "merged":
                info(green(f"  ✓   Pull request #{pull_request.number} has been merged."))
                return
            if state == "closed":
                warn(yellow(f"  ✘   Pull request #{pull_request.number} has been closed."))
                raise UserAbortedReleaseActionError()
        error(red(f"  ✘   Pull request #{pull_request.number} has not been merged in time."))
        error(red("      Please merge the pull request and re-run the release tool."))
        raise FatalReleaseActionError()

    def prepend_release_notes_to_changelog(self, release_notes: ReleaseNotes) -> None:
        """Prepends the changelog entry of the release to the changelog at HEAD."""
        release_notes.prepend_entry_to_changelog(self.project_dir)
        info(green(f'  ✓   Updated the changelog to capture changes for "{release_notes.version}".'))

    def checkout_upstream_branch(self, branch_name: str) -> None:
        """Checks out an upstream branch with a detached head."""
        self.git.run(["fetch", "-q", self.git.get_repo_git_url(), branch_name])
        self.git.run(["checkout", "-q", "FETCH_HEAD", "--detach"])

    def create_commit(self, message: str, files: list[str]) -> None:
        """Commits the given project-relative files."""
        self.git.run(["commit", "-q", "--no-verify", "-m", message, *files])

    async def stage_version_for_branch_and_create_pull_request(
        self, new_version: SemVer, pull_request_base_branch: str
    ) -> StagedRelease:
        """Bumps the version, updates the changelog and creates a staging pull request from HEAD."""
        current_version_tag = self.get_project_version().format()
        release_notes = ReleaseNotes.from_range(
            self.git, new_version, current_version_tag, "HEAD", self.github_config, self.config.release_notes
        )
        self.update_project_version(new_version)
        self.prepend_release_notes_to_changelog(release_notes)
        self.wait_for_edits_and_create_release_commit(new_version)

        pull_request = await self.push_changes_to_fork_and_create_pull_request(
            pull_request_base_branch,
            f"release-stage-{new_version}",
            f'Bump version to "v{new_version}" with changelog.',
        )
        info(green("  ✓   Release staging pull request has been created."))
        info(yellow(f"      Please ask team members to review: {pull_request.url}."))
        return StagedRelease(release_notes, pull_request)

    async def checkout_branch_and_stage_version(self, new_version: SemVer, staging_branch: str) -> StagedRelease:
        """Checks out the branch after verifying its CI status and stages the new version."""
        await self.verify_passing_github_status(staging_branch)
        self.checkout_upstream_branch(staging_branch)
        return await self.stage_version_for_branch_and_create_pull_request(new_version, staging_branch)

    async def cherry_pick_changelog_into_next_branch(self, release_notes: ReleaseNotes, staging_branch: str) -> None:
        """Creates a pull request adding the release notes to the changelog of the next branch, and waits for it."""
        next_branch = self.active.next.branch_name
        commit_message = get_release_note_cherry_pick_commit_message(release_notes.version)

        self.checkout_upstream_branch(next_branch)
        self.prepend_release_notes_to_changelog(release_notes)
        self.create_commit(commit_message, [CHANGELOG_FILE_PATH])
        info(green(f'  ✓   Created changelog cherry-pick commit for: "{release_notes.version}".'))

        pull_request = await self.push_changes_to_fork_and_create_pull_request(
            next_branch,
            f"changelog-cherry-pick-{release_notes.version}",
            commit_message,
            f'Cherry-picks the changelog from the "{staging_branch}" branch to the next branch ({next_branch}).',
        )
        info(green(f'  ✓   Pull request for cherry-picking the changelog into "{next_branch}" has been created.'))
        info(yellow(f"      Please ask team members to review: {pull_request.url}."))
        await self.wait_for_pull_request_to_be_merged(pull_request)

    async def create_github_release_for_version(self, release_notes: ReleaseNotes, version_bump_commit_sha: str, prerelease: bool) -> None:
        """Tags the version bump commit upstream and creates a GitHub release for it."""
        tag_name = release_notes.version.format()
        await self.github.create_tag_ref(tag_name, version_bump_commit_sha)
        info(green(f"  ✓   Tagged v{release_notes.version} release upstream."))
        await self.github.create_release(
            tag_name=tag_name,
            name=f"v{release_notes.version}",
            body=release_notes.get_github_release_entry(),
            prerelease=prerelease,
        )
        info(green(f"  ✓   Created v{release_notes.version} release in Github."))

    async def build_and_publish(self, release_notes: ReleaseNotes, publish_branch: str, npm_dist_tag: str) -> None:
        """Builds the packages of the publish branch and publishes them to NPM.

        Raises:
            FatalReleaseActionError: If the branch does not contain the staging commit, or
                building or publishing failed.
        """
        version_bump_commit_sha = await self.get_latest_commit_of_branch(publish_branch)
        if not await self.is_commit_for_version_staging(release_notes.version, version_bump_commit_sha):
            error(red(f'  ✘   Latest commit in "{publish_branch}" branch is not a staging commit.'))
            error(red("      Please make sure the staging pull request has been merged."))
            raise FatalReleaseActionError()

        # Only packages configured in the publish branch are built and published.
        self.checkout_upstream_branch(publish_branch)
        invoke_yarn_install_command(self.project_dir)
        built_packages = invoke_release_build_command(self.project_dir)
        self.verify_package_versions(release_notes.version, built_packages)

        await self.create_github_release_for_version(release_notes, version_bump_commit_sha, npm_dist_tag == "next")
        for built_package in built_packages:
            self.publish_built_package_to_npm(built_package, npm_dist_tag)
        info(green("  ✓   Published all packages successfully"))

    def publish_built_package_to_npm(self, package: BuiltPackage, npm_dist_tag: str) -> None:
        logger.debug("Publishing package", package=package.name, dist_tag=npm_dist_tag)
        try:
            run_npm_publish(package.output_path, npm_dist_tag, self.config.publish_registry)
        except CommandFailedError as exc:
            error(exc.stderr.strip())
            error(red(f'  ✘   An error occurred while publishing "{package.name}".'))
            raise FatalReleaseActionError() from exc
        info(green(f'  ✓   Successfully published "{package.name}".'))

    async def is_commit_for_version_staging(self, version: SemVer, commit_sha: str) -> bool:
        """Whether the commit is the staging commit for the version."""
        message = await self.github.get_commit_message(commit_sha)
        return message.startswith(get_commit_message_for_release(version))

    def verify_package_versions(self, version: SemVer, packages: list[BuiltPackage]) -> None:
        """Verifies that every built package has the released version.

        Experimental packages use ``0.<major * 100 + minor>.<patch>`` as their version.

        Raises:
            FatalReleaseActionError: If a package version does not match.
        """
        experimental_version = SemVer(0, version.major * 100 + version.minor, version.patch, version.prerelease)
        for package in packages:
            package_json = json.loads((package.output_path / "package.json").read_text())
            package_version = SemVer.try_parse(package_json.get("version", ""))
            if package_version != version and package_version != experimental_version:
                error(red("The built package version does not match the version being released."))
                error(f"  Release Version:   {version} ({experimental_version})")
                error(f"  Generated Version: {package_json.get('version')}")
                raise FatalReleaseActionError()
