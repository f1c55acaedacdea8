"""Helpers for version branches such as ``10.2.x``."""

import json
import re
from dataclasses import dataclass

from ng_dev.github.abc import GitHubClientBase
from ng_dev.release.versioning.semver import SemVer

VERSION_BRANCH_PATTERN = re.compile(r"^(\d+)\.(\d+)\.x$")
"""Pattern matching version branches."""


@dataclass(frozen=True)
class VersionBranch:
    """A version branch and its version line, with ``x`` replaced by zero."""

    name: str
    parsed: SemVer


class InvalidBranchVersionError(Exception):
    """Raised when the version in the package.json of a branch cannot be parsed."""

    pass


async def get_version_of_branch(github: GitHubClientBase, branch_name: str) -> SemVer:
    """Gets the version of a branch by reading its ``package.json`` upstream."""
    content = await github.get_file_content("package.json", branch_name)
    version = SemVer.try_parse(str(json.loads(content).get("version", "")))
    if version is None:
        raise InvalidBranchVersionError(f"Invalid version detected in following branch: {branch_name}.")
    return version


def is_version_branch(branch_name: str) -> bool:
    """Whether the branch name denotes a version branch."""
    return VERSION_BRANCH_PATTERN.match(branch_name) is not None


def get_version_for_version_branch(branch_name: str) -> SemVer | None:
    """Converts a version branch into a version, e.g. ``10.0.x`` becomes ``10.0.0``."""
    match = VERSION_BRANCH_PATTERN.match(branch_name)
    if match is None:
        return None
    return SemVer(int(match.group(1)), int(match.group(2)), 0)


async def get_branches_for_major_versions(github: GitHubClientBase, major_versions: list[int]) -> list[VersionBranch]:
    """Gets the protected version branches of the given majors, most recent first."""
    branches: list[VersionBranch] = []
    for name in await github.list_branches(protected=True):
        parsed = get_version_for_version_branch(name)
        if parsed is not None and parsed.major in major_versions:
            branches.append(VersionBranch(name, parsed))
    return sorted(branches, key=lambda branch: branch.parsed, reverse=True)
