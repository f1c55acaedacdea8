"""Semantic version value object following the semver 2.0.0 rules."""

import re
from dataclasses import dataclass, field, replace
from functools import total_ordering
from typing import Literal, Self

SEMVER_PATTERN = re.compile(
    r"^v?(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)
"""Pattern matching a semantic version, optionally prefixed with ``v``."""

ReleaseType = Literal["major", "minor", "patch", "premajor", "preminor", "prepatch", "prerelease"]


class InvalidVersionError(ValueError):
    """Raised when a string is not a valid semantic version."""

    pass


def _parse_identifier(identifier: str) -> int | str:
    return int(identifier) if identifier.isdigit() else identifier


def _compare_identifiers(left: int | str, right: int | str) -> int:
    if isinstance(left, int) and isinstance(right, int):
        return (left > right) - (left < right)
    # Numeric identifiers always have lower precedence than alphanumeric ones.
    if isinstance(left, int):
        return -1
    if isinstance(right, int):
        return 1
    return (left > right) - (left < right)


@total_ordering
@dataclass(frozen=True)
class SemVer:
    """An immutable semantic version. Build metadata is ignored for ordering."""

    major: int
    minor: int
    patch: int
    prerelease: tuple[int | str, ...] = ()
    build: tuple[str, ...] = field(default=(), compare=False)

    @classmethod
    def parse(cls, value: str) -> Self:
        """Parses a version string, raising InvalidVersionError if it is invalid."""
        match = SEMVER_PATTERN.match(value.strip())
        if match is None:
            raise InvalidVersionError(f"Invalid version: {value}")
        prerelease = match.group("prerelease")
        build = match.group("build")
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            prerelease=tuple(_parse_identifier(part) for part in prerelease.split(".")) if prerelease else (),
            build=tuple(build.split(".")) if build else (),
        )

    @classmethod
    def try_parse(cls, value: str) -> Self | None:
        """Parses a version string, returning None if it is invalid."""
        try:
            return cls.parse(value)
        except InvalidVersionError:
            return None

    def format(self) -> str:
        """Formats the version without build metadata, e.g. ``11.0.0-next.1``."""
        version = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            version += "-" + ".".join(str(part) for part in self.prerelease)
        return version

    def __str__(self) -> str:
        return self.format()

    def _compare(self, other: "SemVer") -> int:
        for left, right in ((self.major, other.major), (self.minor, other.minor), (self.patch, other.patch)):
            if left != right:
                return (left > right) - (left < right)
        if not self.prerelease or not other.prerelease:
            # A version without prerelease has higher precedence.
            return (not self.prerelease) - (not other.prerelease)
        for left_id, right_id in zip(self.prerelease, other.prerelease):
            result = _compare_identifiers(left_id, right_id)
            if result:
                return result
        return (len(self.prerelease) > len(other.prerelease)) - (len(self.prerelease) < len(other.prerelease))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._compare(other) == 0

    def __lt__(self, other: "SemVer") -> bool:
        return self._compare(other) < 0

    def __hash__(self) -> int:
        return hash((self.major, self.minor, self.patch, self.prerelease))

    def _inc_pre(self, identifier: str | None) -> "SemVer":
        prerelease = list(self.prerelease)
        if not prerelease:
            prerelease = [0]
        else:
            for index in range(len(prerelease) - 1, -1, -1):
                part = prerelease[index]
                if isinstance(part, int):
                    prerelease[index] = part + 1
                    break
            else:
                prerelease.append(0)
        if identifier:
            if prerelease[0] != identifier or len(prerelease) < 2 or not isinstance(prerelease[1], int):
                prerelease = [identifier, 0]
        return replace(self, prerelease=tuple(prerelease), build=())

    def inc(self, release: ReleaseType, identifier: str | None = None) -> "SemVer":
        """Returns a new version incremented by the given release type."""
        if release == "premajor":
            return SemVer(self.major + 1, 0, 0)._inc_pre(identifier)
        if release == "preminor":
            return SemVer(self.major, self.minor + 1, 0)._inc_pre(identifier)
        if release == "prepatch":
            return SemVer(self.major, self.minor, self.patch + 1)._inc_pre(identifier)
        if release == "prerelease":
            base = self if self.prerelease else SemVer(self.major, self.minor, self.patch + 1)
            return base._inc_pre(identifier)
        if release == "major":
            if self.minor != 0 or self.patch != 0 or not self.prerelease:
                return SemVer(self.major + 1, 0, 0)
            return SemVer(self.major, 0, 0)
        if release == "minor":
            if self.patch != 0 or not self.prerelease:
                return SemVer(self.major, self.minor + 1, 0)
            return SemVer(self.major, self.minor, 0)
        if release == "patch":
            if not self.prerelease:
                return SemVer(self.major, self.minor, self.patch + 1)
            return SemVer(self.major, self.minor, self.patch)
        raise ValueError(f"Invalid release type: {release}")


def semver_inc(version: SemVer | str, release: ReleaseType, identifier: str | None = None) -> SemVer:
    """Increments a version without modifying the version passed in."""
    clone = SemVer.parse(version) if isinstance(version, str) else replace(version)
    return clone.inc(release, identifier)
