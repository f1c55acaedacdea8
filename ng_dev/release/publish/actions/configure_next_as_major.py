"""Release action configuring the next release train as a major."""

from ng_dev.configuration.models import ReleaseConfig
from ng_dev.npm.registry import NpmRegistryClientBase
from ng_dev.release.publish.actions.base import PACKAGE_JSON_PATH, ReleaseAction
from ng_dev.release.publish.commit_message import get_commit_message_for_next_branch_major_switch
from ng_dev.release.versioning import ActiveReleaseTrains, SemVer
from ng_dev.utils.console import green, info, yellow


class ConfigureNextAsMajorAction(ReleaseAction):
    """Bumps the next branch to the next major so major changes can land."""

    @classmethod
    async def is_active(cls, active: ActiveReleaseTrains, config: ReleaseConfig, registry: NpmRegistryClientBase) -> bool:
        # A major can contain minor changes, so a minor next branch can always become a major.
        return not active.next.is_major

    @property
    def new_version(self) -> SemVer:
        return SemVer(self.active.next.version.major + 1, 0, 0, ("next", 0))

    async def get_description(self) -> str:
        return f'Configure the "{self.active.next.branch_name}" branch to be released as major (v{self.new_version}).'

    async def perform(self) -> None:
        branch_name = self.active.next.branch_name
        new_version = self.new_version
        await self.verify_passing_github_status(branch_name)
        self.checkout_upstream_branch(branch_name)
        self.update_project_version(new_version)
        self.create_commit(get_commit_message_for_next_branch_major_switch(new_version), [PACKAGE_JSON_PATH])
        pull_request = await self.push_changes_to_fork_and_create_pull_request(
            branch_name,
            f"switch-next-to-major-{new_version}",
            f"Configure next branch to receive major changes for v{new_version}",
        )
        info(green("  ✓   Next branch update pull request has been created."))
        info(yellow(f"      Please ask team members to review: {pull_request.url}."))
