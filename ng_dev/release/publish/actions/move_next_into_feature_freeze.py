"""Release action moving the next release train into the feature-freeze phase."""

from ng_dev.configuration.models import ReleaseConfig
from ng_dev.npm.registry import NpmRegistryClientBase
from ng_dev.release.notes.release_notes import ReleaseNotes
from ng_dev.release.publish.actions.base import PACKAGE_JSON_PATH, ReleaseAction
from ng_dev.release.publish.commit_message import (
    get_commit_message_for_exceptional_next_version_bump,
    get_release_note_cherry_pick_commit_message,
)
from ng_dev.release.versioning import ActiveReleaseTrains, SemVer, compute_new_prerelease_version_for_next
from ng_dev.utils.console import green, info, yellow
from ng_dev.utils.constants import CHANGELOG_FILE_PATH


class MoveNextIntoFeatureFreezeAction(ReleaseAction):
    """Branches off a new version branch from next and cuts a feature-freeze pre-release from it.

    Afterwards the next branch is bumped to the subsequent minor.
    """

    _new_version: SemVer | None = None

    @classmethod
    async def is_active(cls, active: ActiveReleaseTrains, config: ReleaseConfig, registry: NpmRegistryClientBase) -> bool:
        # Only one release train can be in feature-freeze or release-candidate phase.
        return active.release_candidate is None

    async def get_new_version(self) -> SemVer:
        if self._new_version is None:
            self._new_version = await compute_new_prerelease_version_for_next(
                self.active, self.registry, self.config.npm_packages[0]
            )
        return self._new_version

    async def get_description(self) -> str:
        branch_name = self.active.next.branch_name
        return f'Move the "{branch_name}" branch into feature-freeze phase (v{await self.get_new_version()}).'

    async def perform(self) -> None:
        new_version = await self.get_new_version()
        new_branch = f"{new_version.major}.{new_version.minor}.x"

        await self.create_new_version_branch_from_next(new_branch)
        # The new branch is still checked out, so the version is staged without fetching it again.
        staged = await self.stage_version_for_branch_and_create_pull_request(new_version, new_branch)
        await self.wait_for_pull_request_to_be_merged(staged.pull_request)
        await self.build_and_publish(staged.release_notes, new_branch, "next")
        await self.create_next_branch_update_pull_request(staged.release_notes, new_version)

    async def create_new_version_branch_from_next(self, new_branch: str) -> None:
        next_branch = self.active.next.branch_name
        await self.verify_passing_github_status(next_branch)
        self.checkout_upstream_branch(next_branch)
        self.create_local_branch_from_head(new_branch)
        self.push_head_to_remote_branch(new_branch)
        info(green(f'  ✓   Version branch "{new_branch}" created.'))

    async def create_next_branch_update_pull_request(self, release_notes: ReleaseNotes, new_version: SemVer) -> None:
        """Creates a pull request bumping next to the subsequent minor and adding the changelog."""
        next_branch = self.active.next.branch_name
        version = self.active.next.version
        # Whether next becomes a major is decided later with the configure-next-as-major action.
        new_next_version = SemVer(version.major, version.minor + 1, 0, ("next", 0))

        self.checkout_upstream_branch(next_branch)
        self.update_project_version(new_next_version)
        # The changelog goes into its own commit to show where it was cherry-picked from.
        self.create_commit(get_commit_message_for_exceptional_next_version_bump(new_next_version), [PACKAGE_JSON_PATH])
        self.prepend_release_notes_to_changelog(release_notes)
        self.create_commit(get_release_note_cherry_pick_commit_message(release_notes.version), [CHANGELOG_FILE_PATH])

        body = (
            'The previous "next" release-train has moved into the release-candidate phase. This PR '
            "updates the next branch to the subsequent release-train.\n\nAlso this PR cherry-picks "
            f"the changelog for v{new_version} into the {next_branch} branch so that the changelog is up to date."
        )
        pull_request = await self.push_changes_to_fork_and_create_pull_request(
            next_branch,
            f"next-release-train-{new_next_version}",
            f'Update next branch to reflect new release-train "v{new_next_version}".',
            body,
        )
        info(green(f'  ✓   Pull request for updating the "{next_branch}" branch has been created.'))
        info(yellow(f"      Please ask team members to review: {pull_request.url}."))
