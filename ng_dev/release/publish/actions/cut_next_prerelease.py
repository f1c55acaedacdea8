"""Release action cutting a new pre-release for the ``next`` NPM dist tag."""

from ng_dev.configuration.models import ReleaseConfig
from ng_dev.npm.registry import NpmRegistryClientBase
from ng_dev.release.publish.actions.base import ReleaseAction
from ng_dev.release.versioning import (
    ActiveReleaseTrains,
    ReleaseTrain,
    SemVer,
    compute_new_prerelease_version_for_next,
    semver_inc,
)


class CutNextPrereleaseAction(ReleaseAction):
    """Cuts a next pre-release, from the feature-freeze/release-candidate branch if there is one."""

    _new_version: SemVer | None = None

    @classmethod
    async def is_active(cls, active: ActiveReleaseTrains, config: ReleaseConfig, registry: NpmRegistryClientBase) -> bool:
        # Pre-releases for the next dist tag can always be cut.
        return True

    def get_active_prerelease_train(self) -> ReleaseTrain:
        return self.active.release_candidate or self.active.next

    async def get_new_version(self) -> SemVer:
        if self._new_version is None:
            release_train = self.get_active_prerelease_train()
            if release_train is self.active.next:
                self._new_version = await compute_new_prerelease_version_for_next(
                    self.active, self.registry, self.config.npm_packages[0]
                )
            else:
                self._new_version = semver_inc(release_train.version, "prerelease")
        return self._new_version

    async def get_description(self) -> str:
        branch_name = self.get_active_prerelease_train().branch_name
        return f'Cut a new next pre-release for the "{branch_name}" branch (v{await self.get_new_version()}).'

    async def perform(self) -> None:
        release_train = self.get_active_prerelease_train()
        new_version = await self.get_new_version()
        staged = await self.checkout_branch_and_stage_version(new_version, release_train.branch_name)
        await self.wait_for_pull_request_to_be_merged(staged.pull_request)
        await self.build_and_publish(staged.release_notes, release_train.branch_name, "next")

        # Pre-releases cut from a feature-freeze or release-candidate branch also need their
        # changelog in the next branch.
        if release_train is not self.active.next:
            await self.cherry_pick_changelog_into_next_branch(staged.release_notes, release_train.branch_name)
