"""Release action cutting a stable release for a release train in the release-candidate phase."""

from ng_dev.configuration.models import ReleaseConfig
from ng_dev.npm.registry import NpmRegistryClientBase
from ng_dev.release.publish.actions.base import ReleaseAction
from ng_dev.release.publish.external_commands import invoke_set_npm_dist_command, invoke_yarn_install_command
from ng_dev.release.versioning import ActiveReleaseTrains, ReleaseTrain, SemVer, get_lts_npm_dist_tag_of_major


class CutStableAction(ReleaseAction):
    """Removes the release-candidate label from the version and publishes it as stable.

    New majors are published to the ``next`` dist tag first, so that dependent projects can
    release their matching major before it becomes ``latest``. The previous latest release
    train then moves to its LTS dist tag.
    """

    @classmethod
    async def is_active(cls, active: ActiveReleaseTrains, config: ReleaseConfig, registry: NpmRegistryClientBase) -> bool:
        # Stable versions cannot be cut directly from the feature-freeze phase.
        return active.release_candidate is not None and active.release_candidate.version.prerelease[:1] == ("rc",)

    @property
    def release_candidate(self) -> ReleaseTrain:
        assert self.active.release_candidate is not None
        return self.active.release_candidate

    @property
    def new_version(self) -> SemVer:
        version = self.release_candidate.version
        return SemVer(version.major, version.minor, version.patch)

    async def get_description(self) -> str:
        return f"Cut a stable release for the release-candidate branch (v{self.new_version})."

    async def perform(self) -> None:
        branch_name = self.release_candidate.branch_name
        is_new_major = self.release_candidate.is_major
        staged = await self.checkout_branch_and_stage_version(self.new_version, branch_name)
        await self.wait_for_pull_request_to_be_merged(staged.pull_request)
        await self.build_and_publish(staged.release_notes, branch_name, "next" if is_new_major else "latest")

        if is_new_major:
            # The dist tag is set by the ng-dev of the previous patch branch, so packages that
            # only exist in that branch get the LTS tag too.
            previous_patch = self.active.latest
            lts_tag_for_patch = get_lts_npm_dist_tag_of_major(previous_patch.version.major)
            self.checkout_upstream_branch(previous_patch.branch_name)
            invoke_yarn_install_command(self.project_dir)
            invoke_set_npm_dist_command(self.project_dir, lts_tag_for_patch, previous_patch.version)

        await self.cherry_pick_changelog_into_next_branch(staged.release_notes, branch_name)
