"""Release trains, i.e. branches tracking a version line of the project."""

from dataclasses import dataclass, field

from ng_dev.release.versioning.semver import SemVer


@dataclass(frozen=True)
class ReleaseTrain:
    """A branch together with the most recent version of its release line."""

    branch_name: str
    version: SemVer
    is_major: bool = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "is_major", self.version.minor == 0 and self.version.patch == 0)


@dataclass(frozen=True)
class ActiveReleaseTrains:
    """The release trains that are currently active in the repository."""

    release_candidate: ReleaseTrain | None
    latest: ReleaseTrain
    next: ReleaseTrain

    def is_feature_freeze(self) -> bool:
        """Whether the release-candidate train is in the feature-freeze phase."""
        return self.release_candidate is not None and self.release_candidate.version.prerelease[:1] == ("next",)
