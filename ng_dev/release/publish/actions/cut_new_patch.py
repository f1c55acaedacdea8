"""Release action cutting a new patch release for the latest release train."""

from ng_dev.configuration.models import ReleaseConfig
from ng_dev.npm.registry import NpmRegistryClientBase
from ng_dev.release.publish.actions.base import ReleaseAction
from ng_dev.release.versioning import ActiveReleaseTrains, SemVer, semver_inc


class CutNewPatchAction(ReleaseAction):
    """Cuts a patch release from the patch branch and cherry-picks its changelog into the next branch."""

    @classmethod
    async def is_active(cls, active: ActiveReleaseTrains, config: ReleaseConfig, registry: NpmRegistryClientBase) -> bool:
        return True

    @property
    def new_version(self) -> SemVer:
        return semver_inc(self.active.latest.version, "patch")

    async def get_description(self) -> str:
        return f'Cut a new patch release for the "{self.active.latest.branch_name}" branch (v{self.new_version}).'

    async def perform(self) -> None:
        branch_name = self.active.latest.branch_name
        staged = await self.checkout_branch_and_stage_version(self.new_version, branch_name)
        await self.wait_for_pull_request_to_be_merged(staged.pull_request)
        await self.build_and_publish(staged.release_notes, branch_name, "latest")
        await self.cherry_pick_changelog_into_next_branch(staged.release_notes, branch_name)
