"""Determines the minor and patch branches a change merges into for a project version."""

from dataclasses import dataclass

import structlog

from ng_dev.npm.registry import NpmRegistryClientBase
from ng_dev.release.versioning.semver import SemVer

logger = structlog.get_logger(__name__)


class MergeBranchesError(Exception):
    """Raised when the merge branches cannot be determined for a version."""

    pass


@dataclass(frozen=True)
class MergeBranches:
    """Branch names of the current minor and patch release lines."""

    minor: str
    patch: str


async def determine_merge_branches(
    current_version: str,
    npm_package_name: str,
    registry: NpmRegistryClientBase,
) -> MergeBranches:
    """Determines merge branches from the project version.

    The branches are derived statically from the version whenever possible. Only for
    a major pre-release the latest stable minor cannot be derived, in which case the
    ``latest`` dist tag is looked up in the NPM registry.
    """
    project_version = SemVer.try_parse(current_version)
    if project_version is None:
        raise MergeBranchesError('Cannot parse version set in project "package.json" file.')

    major, minor, patch = project_version.major, project_version.minor, project_version.patch
    is_major = minor == 0 and patch == 0
    is_minor = minor != 0 and patch == 0

    if not project_version.prerelease:
        return MergeBranches(minor=f"{major}.x", patch=f"{major}.{minor}.x")
    if is_minor:
        return MergeBranches(minor=f"{major}.x", patch=f"{major}.{minor - 1}.x")
    if not is_major:
        raise MergeBranchesError("Unexpected version. Cannot have prerelease for patch version.")

    logger.debug("Looking up latest release in NPM registry", package=npm_package_name)
    info = await registry.fetch_package_info(npm_package_name)
    latest_version = info.get("dist-tags", {}).get("latest", "")
    if not latest_version:
        raise MergeBranchesError("Could not determine version of latest release.")
    parsed_latest_version = SemVer.try_parse(latest_version)
    expected_major = major - 1
    if parsed_latest_version is None:
        raise MergeBranchesError(f"Could not parse latest version from NPM registry: {latest_version}")
    if parsed_latest_version.major != expected_major:
        raise MergeBranchesError(f"Expected latest release to have major version: v{expected_major}, but got: v{latest_version}")
    return MergeBranches(minor=f"{expected_major}.x", patch=f"{expected_major}.{parsed_latest_version.minor}.x")
