"""Release action cutting the first release candidate of a release train in feature-freeze."""

from ng_dev.configuration.models import ReleaseConfig
from ng_dev.npm.registry import NpmRegistryClientBase
from ng_dev.release.publish.actions.base import ReleaseAction
from ng_dev.release.versioning import ActiveReleaseTrains, ReleaseTrain, SemVer, semver_inc


class CutReleaseCandidateAction(ReleaseAction):
    """Bumps the feature-freeze version from ``next`` to ``rc.0`` and publishes it."""

    @classmethod
    async def is_active(cls, active: ActiveReleaseTrains, config: ReleaseConfig, registry: NpmRegistryClientBase) -> bool:
        return active.is_feature_freeze()

    @property
    def release_candidate(self) -> ReleaseTrain:
        assert self.active.release_candidate is not None
        return self.active.release_candidate

    @property
    def new_version(self) -> SemVer:
        return semver_inc(self.release_candidate.version, "prerelease", "rc")

    async def get_description(self) -> str:
        return f"Cut a first release-candidate for the feature-freeze branch (v{self.new_version})."

    async def perform(self) -> None:
        branch_name = self.release_candidate.branch_name
        staged = await self.checkout_branch_and_stage_version(self.new_version, branch_name)
        await self.wait_for_pull_request_to_be_merged(staged.pull_request)
        await self.build_and_publish(staged.release_notes, branch_name, "next")
        await self.cherry_pick_changelog_into_next_branch(staged.release_notes, branch_name)
