"""Long-term support (LTS) release lines, as tagged in the NPM registry."""

import calendar
import re
from dataclasses import dataclass
from datetime import datetime, timezone

from ng_dev.npm.registry import NpmRegistryClientBase
from ng_dev.release.versioning.semver import SemVer

MAJOR_ACTIVE_SUPPORT_DURATION = 6
"""Number of months a major version is actively supported."""

MAJOR_LONG_TERM_SUPPORT_DURATION = 12
"""Number of months a major version receives long-term support after active support ends."""

LTS_NPM_DIST_TAG_PATTERN = re.compile(r"^v(\d+)-lts$")
"""Pattern matching LTS NPM dist tags."""


@dataclass(frozen=True)
class LtsBranch:
    """A long-term support branch and the version its dist tag points to."""

    name: str
    version: SemVer
    npm_dist_tag: str


@dataclass(frozen=True)
class LtsBranches:
    """Active and inactive LTS branches, most recent first."""

    active: list[LtsBranch]
    inactive: list[LtsBranch]


def parse_npm_timestamp(value: str) -> datetime:
    """Parses a timestamp of the NPM registry ``time`` map."""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def compute_lts_end_date_of_major(major_release_date: datetime) -> datetime:
    """Computes when long-term support ends for a major released at the given date."""
    months = major_release_date.month - 1 + MAJOR_ACTIVE_SUPPORT_DURATION + MAJOR_LONG_TERM_SUPPORT_DURATION
    year = major_release_date.year + months // 12
    month = months % 12 + 1
    day = min(major_release_date.day, calendar.monthrange(year, month)[1])
    return major_release_date.replace(year=year, month=month, day=day)


def get_lts_npm_dist_tag_of_major(major: int) -> str:
    """Gets the LTS dist tag of a major version, e.g. ``v10-lts``."""
    return f"v{major}-lts"


async def fetch_long_term_support_branches_from_npm(
    registry: NpmRegistryClientBase,
    package_name: str,
    today: datetime | None = None,
) -> LtsBranches:
    """Finds all LTS branches of the project from the dist tags of its representative package."""
    info = await registry.fetch_package_info(package_name)
    dist_tags: dict[str, str] = info.get("dist-tags", {})
    release_times: dict[str, str] = info.get("time", {})
    now = today if today is not None else datetime.now(timezone.utc)

    active: list[LtsBranch] = []
    inactive: list[LtsBranch] = []
    for npm_dist_tag, raw_version in dist_tags.items():
        if not LTS_NPM_DIST_TAG_PATTERN.match(npm_dist_tag):
            continue
        version = SemVer.parse(raw_version)
        lts_branch = LtsBranch(f"{version.major}.{version.minor}.x", version, npm_dist_tag)
        major_release_date = parse_npm_timestamp(release_times[f"{version.major}.0.0"])
        if now <= compute_lts_end_date_of_major(major_release_date):
            active.append(lts_branch)
        else:
            inactive.append(lts_branch)

    active.sort(key=lambda branch: branch.version, reverse=True)
    inactive.sort(key=lambda branch: branch.version, reverse=True)
    return LtsBranches(active, inactive)
