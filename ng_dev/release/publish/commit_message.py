"""Commit messages of the commits created by the release tool."""

from ng_dev.release.versioning import SemVer


def get_commit_message_for_release(new_version: SemVer) -> str:
    """Gets the commit message for a new release point in the project."""
    return f"release: cut the v{new_version} release"


def get_commit_message_for_exceptional_next_version_bump(new_version: SemVer) -> str:
    """Gets the commit message for bumping the next branch without publishing a release."""
    return f"release: bump the next branch to v{new_version}"


def get_commit_message_for_next_branch_major_switch(new_version: SemVer) -> str:
    """Gets the commit message for switching the next branch to a major version."""
    return f"release: switch the next branch to v{new_version}"


def get_release_note_cherry_pick_commit_message(new_version: SemVer) -> str:
    """Gets the commit message for cherry-picking release notes into another branch."""
    return f"docs: release notes for the v{new_version} release"
