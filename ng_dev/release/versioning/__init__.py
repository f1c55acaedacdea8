"""Versioning helpers for release trains, LTS branches and semantic versions."""

from .active_release_trains import ReleaseTrainsError, fetch_active_release_trains
from .long_term_support import (
    LtsBranch,
    LtsBranches,
    compute_lts_end_date_of_major,
    fetch_long_term_support_branches_from_npm,
    get_lts_npm_dist_tag_of_major,
)
from .merge_branches import MergeBranches, MergeBranchesError, determine_merge_branches
from .next_prerelease_version import compute_new_prerelease_version_for_next
from .release_trains import ActiveReleaseTrains, ReleaseTrain
from .semver import InvalidVersionError, SemVer, semver_inc
from .version_branches import get_version_for_version_branch, get_version_of_branch, is_version_branch

__all__ = [
    "ActiveReleaseTrains",
    "InvalidVersionError",
    "LtsBranch",
    "LtsBranches",
    "MergeBranches",
    "MergeBranchesError",
    "ReleaseTrain",
    "ReleaseTrainsError",
    "SemVer",
    "compute_lts_end_date_of_major",
    "compute_new_prerelease_version_for_next",
    "determine_merge_branches",
    "fetch_active_release_trains",
    "fetch_long_term_support_branches_from_npm",
    "get_lts_npm_dist_tag_of_major",
    "get_version_for_version_branch",
    "get_version_of_branch",
    "is_version_branch",
    "semver_inc",
]
