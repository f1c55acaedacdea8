"""Prints the active release trains of the project."""

from ng_dev.npm.registry import NpmRegistryClientBase, is_version_published_to_npm
from ng_dev.release.versioning.long_term_support import fetch_long_term_support_branches_from_npm
from ng_dev.release.versioning.release_trains import ActiveReleaseTrains
from ng_dev.utils.console import blue, bold, info


async def print_active_release_trains(active: ActiveReleaseTrains, registry: NpmRegistryClientBase, package_name: str) -> None:
    """Prints the active release trains and LTS branches to the console."""
    release_candidate, latest, next_train = active.release_candidate, active.latest, active.next
    is_next_published_to_npm = await is_version_published_to_npm(registry, package_name, next_train.version.format())
    next_train_type = "major" if next_train.is_major else "minor"
    lts_branches = await fetch_long_term_support_branches_from_npm(registry, package_name)

    info()
    info(blue("Current version branches in the project:"))
    if release_candidate is not None:
        rc_version = release_candidate.version
        rc_train_type = "major" if release_candidate.is_major else "minor"
        rc_train_phase = "feature-freeze" if rc_version.prerelease[0] == "next" else "release-candidate"
        info(
            f" • {bold(release_candidate.branch_name)} contains changes for an upcoming "
            f"{rc_train_type} that is currently in {bold(rc_train_phase)} phase."
        )
        info(f'   Most recent pre-release for this branch is "{bold(f"v{rc_version}")}".')

    info(f" • {bold(latest.branch_name)} contains changes for the most recent patch.")
    info(f'   Most recent patch version for this branch is "{bold(f"v{latest.version}")}".')
    info(f" • {bold(next_train.branch_name)} contains changes for a {next_train_type} currently in active development.")
    if is_next_published_to_npm:
        info(f'   Most recent pre-release version for this branch is "{bold(f"v{next_train.version}")}".')
    else:
        info(f'   Version is currently set to "{bold(f"v{next_train.version}")}", but has not been published yet.')

    if release_candidate is None:
        info(" • No release-candidate or feature-freeze branch currently active.")

    info()
    info(blue("Current active LTS version branches:"))
    for lts_branch in lts_branches.active:
        info(f" • {bold(lts_branch.name)} is currently in active long-term support phase.")
        info(f'   Most recent patch version for this branch is "{bold(f"v{lts_branch.version}")}".')
    info()
