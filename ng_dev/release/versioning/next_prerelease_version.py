"""Computes the version of the next pre-release published from the next branch."""

from ng_dev.npm.registry import NpmRegistryClientBase, is_version_published_to_npm
from ng_dev.release.versioning.release_trains import ActiveReleaseTrains
from ng_dev.release.versioning.semver import SemVer, semver_inc


async def compute_new_prerelease_version_for_next(
    active: ActiveReleaseTrains,
    registry: NpmRegistryClientBase,
    package_name: str,
) -> SemVer:
    """Computes the new pre-release version for the next release-train.

    The version in the next branch is used as is until it has been published.
    """
    next_version = active.next.version
    if await is_version_published_to_npm(registry, package_name, next_version.format()):
        return semver_inc(next_version, "prerelease")
    return next_version
