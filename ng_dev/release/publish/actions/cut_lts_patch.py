"""Release action cutting a patch release for a release train in long-term support."""

from ng_dev.configuration.models import ReleaseConfig
from ng_dev.npm.registry import NpmRegistryClientBase
from ng_dev.release.publish.actions.base import ReleaseAction
from ng_dev.release.publish.actions_error import FatalReleaseActionError
from ng_dev.release.versioning import (
    ActiveReleaseTrains,
    LtsBranch,
    LtsBranches,
    fetch_long_term_support_branches_from_npm,
    semver_inc,
)
from ng_dev.utils.console import error, prompt_select, red

INACTIVE_LTS_CHOICE = "Inactive LTS versions (not recommended)"


class CutLongTermSupportPatchAction(ReleaseAction):
    """Cuts a patch release for an LTS branch selected by the caretaker.

    The release is published with the ``v<major>-lts`` dist tag of the branch and its
    changelog is cherry-picked into the next branch.
    """

    _lts_branches: LtsBranches | None = None

    @classmethod
    async def is_active(cls, active: ActiveReleaseTrains, config: ReleaseConfig, registry: NpmRegistryClientBase) -> bool:
        # Always offered, as patches may be cut for inactive LTS branches too.
        return True

    async def get_lts_branches(self) -> LtsBranches:
        if self._lts_branches is None:
            self._lts_branches = await fetch_long_term_support_branches_from_npm(self.registry, self.config.npm_packages[0])
        return self._lts_branches

    async def get_description(self) -> str:
        lts_branches = await self.get_lts_branches()
        return f"Cut a new release for an active LTS branch ({len(lts_branches.active)} active)."

    async def perform(self) -> None:
        lts_branch = await self.prompt_for_target_lts_branch()
        new_version = semver_inc(lts_branch.version, "patch")
        staged = await self.checkout_branch_and_stage_version(new_version, lts_branch.name)
        await self.wait_for_pull_request_to_be_merged(staged.pull_request)
        await self.build_and_publish(staged.release_notes, lts_branch.name, lts_branch.npm_dist_tag)
        await self.cherry_pick_changelog_into_next_branch(staged.release_notes, lts_branch.name)

    async def prompt_for_target_lts_branch(self) -> LtsBranch:
        """Asks the caretaker for the LTS branch to patch, offering inactive branches on request."""
        lts_branches = await self.get_lts_branches()
        if not lts_branches.active and not lts_branches.inactive:
            error(red("  ✘   No LTS versions are tagged in NPM."))
            raise FatalReleaseActionError()

        choices = [self.describe_lts_branch(branch) for branch in lts_branches.active]
        if lts_branches.inactive:
            choices.append(INACTIVE_LTS_CHOICE)

        index = prompt_select("Please select a version for which you want to cut an LTS patch", choices)
        if index < len(lts_branches.active):
            return lts_branches.active[index]

        inactive_index = prompt_select(
            "Please select an inactive LTS version for which you want to cut an LTS patch",
            [self.describe_lts_branch(branch) for branch in lts_branches.inactive],
        )
        return lts_branches.inactive[inactive_index]

    @staticmethod
    def describe_lts_branch(branch: LtsBranch) -> str:
        return f"v{branch.version.major} (from {branch.name})"
