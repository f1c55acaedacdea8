"""Unit tests for semantic versions, merge branches, release trains and LTS branches."""

import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from ng_dev.release.versioning import (
    InvalidVersionError,
    ReleaseTrainsError,
    SemVer,
    compute_lts_end_date_of_major,
    fetch_active_release_trains,
    semver_inc,
)
from ng_dev.release.versioning.long_term_support import fetch_long_term_support_branches_from_npm
from ng_dev.release.versioning.merge_branches import MergeBranchesError, determine_merge_branches
from ng_dev.release.versioning.next_prerelease_version import compute_new_prerelease_version_for_next
from ng_dev.release.versioning.release_trains import ActiveReleaseTrains, ReleaseTrain
from ng_dev.release.versioning.version_branches import get_version_for_version_branch, is_version_branch


def make_github(versions_by_branch: dict[str, str]) -> MagicMock:
    """Create a GitHub client serving package.json versions for the given branches."""
    github = MagicMock()

    async def get_file_content(path: str, ref: str) -> str:
        return json.dumps({"name": "test", "version": versions_by_branch[ref]})

    github.get_file_content = AsyncMock(side_effect=get_file_content)
    github.list_branches = AsyncMock(return_value=list(versions_by_branch))
    return github


def make_registry(info: dict) -> MagicMock:
    """Create an NPM registry client returning the given package document."""
    registry = MagicMock()
    registry.fetch_package_info = AsyncMock(return_value=info)
    return registry


def test_semver_parse() -> None:
    """Test parsing versions with prefix, prerelease and build metadata."""
    version = SemVer.parse("v11.0.0-next.1+sha.abc")
    assert (version.major, version.minor, version.patch) == (11, 0, 0)
    assert version.prerelease == ("next", 1)
    assert version.build == ("sha", "abc")
    assert version.format() == "11.0.0-next.1"


def test_semver_parse_invalid() -> None:
    """Test that invalid versions raise or return None."""
    with pytest.raises(InvalidVersionError):
        SemVer.parse("1.2")
    assert SemVer.try_parse("not-a-version") is None


def test_semver_ordering() -> None:
    """Test precedence of prerelease and numeric identifiers."""
    assert SemVer.parse("1.0.0-rc.1") < SemVer.parse("1.0.0")
    assert SemVer.parse("1.0.0-alpha") < SemVer.parse("1.0.0-alpha.1")
    assert SemVer.parse("1.0.0-2") < SemVer.parse("1.0.0-alpha")
    assert SemVer.parse("1.0.0-next.9") < SemVer.parse("1.0.0-next.10")
    assert SemVer.parse("1.0.0+build") == SemVer.parse("1.0.0")


@pytest.mark.parametrize(
    "version,release,identifier,expected",
    [
        ("10.1.0", "patch", None, "10.1.1"),
        ("10.1.3", "minor", None, "10.2.0"),
        ("10.1.3", "major", None, "11.0.0"),
        ("11.0.0-next.0", "prerelease", None, "11.0.0-next.1"),
        ("11.0.0-next.3", "prerelease", "rc", "11.0.0-rc.0"),
        ("11.0.0-rc.0", "prerelease", "rc", "11.0.0-rc.1"),
        ("10.1.2", "prerelease", None, "10.1.3-0"),
        ("11.0.0-rc.1", "patch", None, "11.0.0"),
    ],
)
def test_semver_inc(version: str, release: str, identifier: str | None, expected: str) -> None:
    """Test incrementing versions by release type."""
    assert semver_inc(version, release, identifier).format() == expected  # type: ignore[arg-type]


def test_semver_inc_does_not_modify_input() -> None:
    """Test that incrementing returns a new version and leaves the input untouched."""
    version = SemVer.parse("1.2.3-next.0")
    incremented = semver_inc(version, "prerelease")
    assert version.format() == "1.2.3-next.0"
    assert incremented.format() == "1.2.3-next.1"


def test_version_branches() -> None:
    """Test detecting version branches and their version."""
    assert is_version_branch("10.2.x") is True
    assert is_version_branch("main") is False
    assert is_version_branch("10.x") is False
    assert get_version_for_version_branch("10.2.x") == SemVer(10, 2, 0)
    assert get_version_for_version_branch("feature") is None


@pytest.mark.asyncio
async def test_merge_branches_for_stable_version_are_static() -> None:
    """Test that stable versions derive merge branches without the registry."""
    registry = make_registry({})
    branches = await determine_merge_branches("10.1.0", "@angular/core", registry)
    assert (branches.minor, branches.patch) == ("10.x", "10.1.x")
    registry.fetch_package_info.assert_not_awaited()


@pytest.mark.asyncio
async def test_merge_branches_for_minor_prerelease() -> None:
    """Test that a minor pre-release targets the previous minor as patch branch."""
    registry = make_registry({})
    branches = await determine_merge_branches("10.1.0-next.0", "@angular/core", registry)
    assert (branches.minor, branches.patch) == ("10.x", "10.0.x")
    registry.fetch_package_info.assert_not_awaited()


@pytest.mark.asyncio
async def test_merge_branches_for_major_prerelease_query_registry_once() -> None:
    """Test that a major pre-release looks up the latest release exactly once."""
    registry = make_registry({"dist-tags": {"latest": "10.2.3"}})
    branches = await determine_merge_branches("11.0.0-next.0", "@angular/core", registry)
    assert (branches.minor, branches.patch) == ("10.x", "10.2.x")
    registry.fetch_package_info.assert_awaited_once_with("@angular/core")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "version,latest",
    [
        ("not-a-version", "10.2.3"),
        ("10.1.1-next.0", "10.1.0"),
        ("11.0.0-next.0", "9.2.0"),
        ("11.0.0-next.0", ""),
    ],
)
async def test_merge_branches_errors(version: str, latest: str) -> None:
    """Test that unexpected versions raise MergeBranchesError."""
    registry = make_registry({"dist-tags": {"latest": latest}})
    with pytest.raises(MergeBranchesError):
        await determine_merge_branches(version, "@angular/core", registry)


@pytest.mark.asyncio
async def test_fetch_active_release_trains_with_release_candidate() -> None:
    """Test discovering release-candidate, latest and next trains."""
    github = make_github({"main": "11.0.0-next.0", "10.2.x": "10.2.0-rc.0", "10.1.x": "10.1.5", "9.3.x": "9.3.2"})
    active = await fetch_active_release_trains(github, "main")
    assert active.next.branch_name == "main"
    assert active.next.is_major is True
    assert active.release_candidate is not None
    assert active.release_candidate.branch_name == "10.2.x"
    assert active.latest.branch_name == "10.1.x"
    assert active.latest.version == SemVer(10, 1, 5)
    assert active.is_feature_freeze() is False


@pytest.mark.asyncio
async def test_fetch_active_release_trains_feature_freeze() -> None:
    """Test that a release-candidate train on a next pre-release is in feature-freeze."""
    github = make_github({"main": "10.3.0-next.0", "10.2.x": "10.2.0-next.4", "10.1.x": "10.1.5"})
    active = await fetch_active_release_trains(github, "main")
    assert active.release_candidate is not None
    assert active.is_feature_freeze() is True
    assert active.next.is_major is False


@pytest.mark.asyncio
async def test_fetch_active_release_trains_without_release_candidate() -> None:
    """Test that the most recent stable version branch is the latest train."""
    github = make_github({"main": "10.3.0-next.0", "10.2.x": "10.2.4", "10.1.x": "10.1.5"})
    active = await fetch_active_release_trains(github, "main")
    assert active.release_candidate is None
    assert active.latest.branch_name == "10.2.x"


@pytest.mark.asyncio
async def test_fetch_active_release_trains_rejects_branch_of_next_train() -> None:
    """Test that a version branch for the train in the next branch is rejected."""
    github = make_github({"main": "10.3.0-next.0", "10.3.x": "10.3.0-next.0", "10.2.x": "10.2.4"})
    with pytest.raises(ReleaseTrainsError, match="already active"):
        await fetch_active_release_trains(github, "main")


@pytest.mark.asyncio
async def test_fetch_active_release_trains_without_latest() -> None:
    """Test that a missing latest release train is an error."""
    github = make_github({"main": "10.3.0-next.0"})
    with pytest.raises(ReleaseTrainsError, match="Unable to determine the latest release-train"):
        await fetch_active_release_trains(github, "main")


@pytest.mark.parametrize(
    "release_date,expected",
    [
        (datetime(2020, 1, 31, tzinfo=timezone.utc), datetime(2021, 7, 31, tzinfo=timezone.utc)),
        (datetime(2020, 8, 31, tzinfo=timezone.utc), datetime(2022, 2, 28, tzinfo=timezone.utc)),
    ],
)
def test_compute_lts_end_date_of_major(release_date: datetime, expected: datetime) -> None:
    """Test that long-term support ends eighteen months after the major release."""
    assert compute_lts_end_date_of_major(release_date) == expected


@pytest.mark.asyncio
async def test_fetch_long_term_support_branches() -> None:
    """Test that LTS dist tags are split into active and inactive branches."""
    registry = make_registry(
        {
            "dist-tags": {"latest": "12.1.0", "v11-lts": "11.2.5", "v10-lts": "10.2.3", "next": "13.0.0-next.0"},
            "time": {"11.0.0": "2026-01-01T00:00:00.000Z", "10.0.0": "2024-01-01T00:00:00.000Z"},
        }
    )
    branches = await fetch_long_term_support_branches_from_npm(
        registry, "@angular/core", today=datetime(2026, 10, 19, tzinfo=timezone.utc)
    )
    assert [branch.name for branch in branches.active] == ["11.2.x"]
    assert [branch.name for branch in branches.inactive] == ["10.2.x"]
    assert branches.active[0].npm_dist_tag == "v11-lts"


@pytest.mark.asyncio
@pytest.mark.parametrize("published,expected", [(True, "11.0.0-next.1"), (False, "11.0.0-next.0")])
async def test_compute_new_prerelease_version_for_next(published: bool, expected: str) -> None:
    """Test that the next version is only incremented once it has been published."""
    registry = make_registry({"versions": {"11.0.0-next.0": {}} if published else {}})
    active = ActiveReleaseTrains(
        release_candidate=None,
        latest=ReleaseTrain("10.2.x", SemVer(10, 2, 4)),
        next=ReleaseTrain("main", SemVer.parse("11.0.0-next.0")),
    )
    version = await compute_new_prerelease_version_for_next(active, registry, "@angular/core")
    assert version.format() == expected
