"""Commit types and their scope and release notes rules."""

from dataclasses import dataclass
from enum import Enum


class ScopeRequirement(str, Enum):
    """Whether commits of a type must, may or must not have a scope."""

    REQUIRED = "required"
    OPTIONAL = "optional"
    FORBIDDEN = "forbidden"


class ReleaseNotesLevel(str, Enum):
    """Whether commits of a type are listed in the release notes."""

    HIDDEN = "hidden"
    VISIBLE = "visible"


@dataclass(frozen=True)
class CommitType:
    """A commit type allowed in commit message headers."""

    name: str
    description: str
    scope: ScopeRequirement
    release_notes_level: ReleaseNotesLevel


COMMIT_TYPES: dict[str, CommitType] = {
    commit_type.name: commit_type
    for commit_type in (
        CommitType("build", "Changes to local repository build system and tooling", ScopeRequirement.OPTIONAL, ReleaseNotesLevel.HIDDEN),
        CommitType("ci", "Changes to CI configuration and CI specific tooling", ScopeRequirement.FORBIDDEN, ReleaseNotesLevel.HIDDEN),
        CommitType("docs", "Changes which exclusively affects documentation.", ScopeRequirement.OPTIONAL, ReleaseNotesLevel.HIDDEN),
        CommitType("feat", "Creates a new feature", ScopeRequirement.REQUIRED, ReleaseNotesLevel.VISIBLE),
        CommitType("fix", "Fixes a previously discovered failure/bug", ScopeRequirement.REQUIRED, ReleaseNotesLevel.VISIBLE),
        CommitType(
            "perf", "Improves performance without any change in functionality or API", ScopeRequirement.REQUIRED, ReleaseNotesLevel.VISIBLE
        ),
        CommitType(
            "refactor",
            "Refactor without any change in functionality or API (includes style changes)",
            ScopeRequirement.OPTIONAL,
            ReleaseNotesLevel.HIDDEN,
        ),
        CommitType("release", "A release point in the repository", ScopeRequirement.FORBIDDEN, ReleaseNotesLevel.HIDDEN),
        CommitType("test", "Improvements or corrections made to the project's test suite", ScopeRequirement.OPTIONAL, ReleaseNotesLevel.HIDDEN),
    )
}
"""The valid commit types, keyed by name."""
