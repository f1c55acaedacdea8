"""Interactive release tool that lets the caretaker pick and perform a release action."""

from enum import Enum
from pathlib import Path

import structlog

from ng_dev.configuration.models import GithubConfig, ReleaseConfig
from ng_dev.github.abc import GitHubClientBase
from ng_dev.npm.publish import NpmLoginError, npm_is_logged_in, npm_login, npm_logout
from ng_dev.npm.registry import NpmRegistryClientBase
from ng_dev.release.publish.actions import ACTIONS, ReleaseAction
from ng_dev.release.publish.actions_error import FatalReleaseActionError, UserAbortedReleaseActionError
from ng_dev.release.versioning import ActiveReleaseTrains, fetch_active_release_trains
from ng_dev.release.versioning.print_active_trains import print_active_release_trains
from ng_dev.utils.console import error, info, prompt_confirm, prompt_select, red, yellow
from ng_dev.utils.git_client import GitClient

logger = structlog.get_logger(__name__)


class CompletionState(str, Enum):
    """How a run of the release tool ended."""

    SUCCESS = "success"
    FATAL_ERROR = "fatal_error"
    MANUALLY_ABORTED = "manually_aborted"


class ReleaseTool:
    """Guides the caretaker through publishing a release."""

    def __init__(
        self,
        git: GitClient,
        github: GitHubClientBase,
        registry: NpmRegistryClientBase,
        github_config: GithubConfig,
        config: ReleaseConfig,
        project_dir: Path,
    ) -> None:
        self.git = git
        self.github = github
        self.registry = registry
        self.github_config = github_config
        self.config = config
        self.project_dir = project_dir
        self.previous_git_branch_or_revision = git.get_current_branch_or_revision()

    async def run(self) -> CompletionState:
        """Runs the interactive release tool."""
        info()
        info(yellow("--------------------------------------------"))
        info(yellow("  ng-dev release staging script"))
        info(yellow("--------------------------------------------"))
        info()

        if not self.verify_no_uncommitted_changes() or not self.verify_running_from_next_branch():
            return CompletionState.FATAL_ERROR
        if not self.verify_npm_login_state():
            return CompletionState.MANUALLY_ABORTED

        try:
            active = await fetch_active_release_trains(self.github, self.github_config.main_branch_name)
            # The caretaker sees the branching state of the project without switching context.
            await print_active_release_trains(active, self.registry, self.config.npm_packages[0])
            action = await self.prompt_for_release_action(active)
            await action.perform()
        except UserAbortedReleaseActionError:
            logger.info("Release action aborted by the caretaker")
            return CompletionState.MANUALLY_ABORTED
        except FatalReleaseActionError:
            # Fatal release action errors have already been printed.
            return CompletionState.FATAL_ERROR
        finally:
            self.cleanup()
        return CompletionState.SUCCESS

    def cleanup(self) -> None:
        """Returns to the git state from before the run and logs out of NPM."""
        self.git.checkout(self.previous_git_branch_or_revision, True)
        npm_logout(self.config.publish_registry)

    async def prompt_for_release_action(self, active: ActiveReleaseTrains) -> ReleaseAction:
        """Asks the caretaker to pick one of the currently active release actions."""
        actions: list[ReleaseAction] = []
        descriptions: list[str] = []
        for action_type in ACTIONS:
            if not await action_type.is_active(active, self.config, self.registry):
                continue
            action = action_type(
                active, self.git, self.github, self.registry, self.github_config, self.config, self.project_dir
            )
            actions.append(action)
            descriptions.append(await action.get_description())

        info("Please select the type of release you want to perform.")
        return actions[prompt_select("Please select an action:", descriptions)]

    def verify_no_uncommitted_changes(self) -> bool:
        if self.git.has_uncommitted_changes():
            error(red("  ✘   There are changes which are not committed and should be discarded."))
            return False
        return True

    def verify_running_from_next_branch(self) -> bool:
        """Verifies that HEAD matches the upstream next branch, so the latest release tooling is used."""
        next_branch = self.github_config.main_branch_name
        head_sha = self.git.run(["rev-parse", "HEAD"]).stdout.strip()
        self.git.run(["fetch", "-q", self.git.get_repo_git_url(), next_branch])
        next_branch_sha = self.git.run(["rev-parse", "FETCH_HEAD"]).stdout.strip()
        if head_sha != next_branch_sha:
            error(red("  ✘   Running release tool from an outdated local branch."))
            error(red(f'      Please make sure you are running from the "{next_branch}" branch.'))
            return False
        return True

    def verify_npm_login_state(self) -> bool:
        """Verifies that the user is logged into the configured registry, offering to log in."""
        registry = f"NPM at the {self.config.publish_registry} registry" if self.config.publish_registry else "NPM"
        if npm_is_logged_in(self.config.publish_registry):
            logger.debug("Already logged into the registry", registry=registry)
            return True
        error(red(f"  ✘   Not currently logged into {registry}."))
        if not prompt_confirm("Would you like to log into NPM now?"):
            return False
        logger.debug("Starting NPM login")
        try:
            npm_login(self.config.publish_registry)
        except NpmLoginError as exc:
            error(red(str(exc)))
            return False
        return True
