"""Determines the active release trains of the project from its branches."""

import structlog

from ng_dev.github.abc import GitHubClientBase
from ng_dev.release.versioning.release_trains import ActiveReleaseTrains, ReleaseTrain
from ng_dev.release.versioning.semver import SemVer
from ng_dev.release.versioning.version_branches import VersionBranch, get_branches_for_major_versions, get_version_of_branch

logger = structlog.get_logger(__name__)


class ReleaseTrainsError(Exception):
    """Raised when the active release trains cannot be determined."""

    pass


async def fetch_active_release_trains(github: GitHubClientBase, next_branch_name: str) -> ActiveReleaseTrains:
    """Fetches the active release trains for the configured project."""
    next_version = await get_version_of_branch(github, next_branch_name)
    next_train = ReleaseTrain(next_branch_name, next_version)

    # A release-candidate train can only be active for the previous major if the next
    # branch just moved to a new major (minor 0), and at most for the current major
    # otherwise. The latest train can additionally be on the previous major while the
    # next branch is at the first minor of a major.
    if next_version.minor == 0:
        expected_release_candidate_major = next_version.major - 1
        major_versions_to_consider = [next_version.major - 1]
    elif next_version.minor == 1:
        expected_release_candidate_major = next_version.major
        major_versions_to_consider = [next_version.major, next_version.major - 1]
    else:
        expected_release_candidate_major = next_version.major
        major_versions_to_consider = [next_version.major]

    branches = await get_branches_for_major_versions(github, major_versions_to_consider)
    release_candidate, latest = await find_active_release_trains_from_version_branches(
        github, next_branch_name, next_version, branches, expected_release_candidate_major
    )
    if latest is None:
        raise ReleaseTrainsError(
            "Unable to determine the latest release-train. The following branches have been "
            f"considered: [{', '.join(branch.name for branch in branches)}]"
        )
    logger.debug(
        "Determined active release trains",
        next=next_train.branch_name,
        latest=latest.branch_name,
        release_candidate=release_candidate.branch_name if release_candidate else None,
    )
    return ActiveReleaseTrains(release_candidate=release_candidate, latest=latest, next=next_train)


async def find_active_release_trains_from_version_branches(
    github: GitHubClientBase,
    next_branch_name: str,
    next_version: SemVer,
    branches: list[VersionBranch],
    expected_release_candidate_major: int,
) -> tuple[ReleaseTrain | None, ReleaseTrain | None]:
    """Finds the release-candidate and latest trains among version branches, most recent first."""
    next_release_train_version = SemVer(next_version.major, next_version.minor, 0)
    latest: ReleaseTrain | None = None
    release_candidate: ReleaseTrain | None = None

    for branch in branches:
        if branch.parsed > next_release_train_version:
            raise ReleaseTrainsError(
                f'Discovered unexpected version-branch "{branch.name}" for a release-train that is '
                f'more recent than the release-train currently in the "{next_branch_name}" branch. '
                "Please either delete the branch if created by accident, or update the outdated "
                f"version in the next branch ({next_branch_name})."
            )
        if branch.parsed == next_release_train_version:
            raise ReleaseTrainsError(
                f'Discovered unexpected version-branch "{branch.name}" for a release-train that is already '
                f'active in the "{next_branch_name}" branch. Please either delete the branch if '
                f"created by accident, or update the version in the next branch ({next_branch_name})."
            )

        version = await get_version_of_branch(github, branch.name)
        release_train = ReleaseTrain(branch.name, version)
        is_prerelease = bool(version.prerelease) and version.prerelease[0] in ("rc", "next")

        if not is_prerelease:
            latest = release_train
            break
        if release_candidate is not None:
            raise ReleaseTrainsError(
                "Unable to determine latest release-train. Found two consecutive branches in "
                f'feature-freeze/release-candidate phase. Did not expect both "{branch.name}" '
                f'and "{release_candidate.branch_name}" to be in feature-freeze/release-candidate mode.'
            )
        if version.major != expected_release_candidate_major:
            raise ReleaseTrainsError(
                "Discovered unexpected old feature-freeze/release-candidate branch. Expected no "
                f"version-branch in feature-freeze/release-candidate mode for v{version.major}."
            )
        release_candidate = release_train

    return release_candidate, latest
