"""Data and helpers exposed to the release notes templates."""

import re
import datetime
from dataclasses import dataclass, field
from datetime import date
from typing import Callable

from ng_dev.commit_message.config import COMMIT_TYPES, ReleaseNotesLevel
from ng_dev.commit_message.parse import Commit
from ng_dev.configuration.models import GithubConfig
from ng_dev.utils.constants import GITHUB_URL

TYPES_TO_INCLUDE_IN_RELEASE_NOTES = [
    commit_type.name for commit_type in COMMIT_TYPES.values() if commit_type.release_notes_level == ReleaseNotesLevel.VISIBLE
]

PULL_REQUEST_REFERENCE_PATTERN = re.compile(r"\(#(\d+)\)$")


@dataclass
class CommitGroup:
    """Commits of a release sharing the same scope."""

    title: str
    commits: list[Commit]


def build_date_stamp(value: date | None = None) -> str:
    """Builds a ``YYYY-MM-DD`` date stamp, defaulting to today."""
    return (value or date.today()).strftime("%Y-%m-%d")


@dataclass
class RenderContext:
    """Context used for rendering a release notes entry."""

    commits: list[Commit]
    github: GithubConfig
    version: str
    group_order: list[str] = field(default_factory=list)
    hidden_scopes: list[str] = field(default_factory=list)
    title: str | None = None
    date: datetime.date | None = None

    @property
    def date_stamp(self) -> str:
        return build_date_stamp(self.date)

    def as_commit_groups(self, commits: list[Commit]) -> list[CommitGroup]:
        """Groups commits by scope.

        Groups are sorted alphabetically, except for groups named in the configured group
        order which come first, in that order. Commits keep their order within a group.
        """
        groups: dict[str, list[Commit]] = {}
        for commit in commits:
            groups.setdefault(commit.scope, []).append(commit)
        commit_groups = sorted((CommitGroup(title, grouped) for title, grouped in groups.items()), key=lambda group: group.title)
        for group_title in reversed(self.group_order):
            index = next((i for i, group in enumerate(commit_groups) if group.title == group_title), None)
            if index is not None:
                commit_groups.insert(0, commit_groups.pop(index))
        return commit_groups

    def include_in_release_notes(self) -> Callable[[Commit], bool]:
        """Filter for commits that are shown in release notes."""

        def _include(commit: Commit) -> bool:
            return commit.type in TYPES_TO_INCLUDE_IN_RELEASE_NOTES and commit.scope not in self.hidden_scopes

        return _include

    def contains(self, field_name: str) -> Callable[[Commit], bool]:
        """Filter for commits with a truthy value, or a non-empty list, in the given field."""

        def _contains(commit: Commit) -> bool:
            return bool(getattr(commit, field_name))

        return _contains

    def unique(self, field_name: str) -> Callable[[Commit], bool]:
        """Filter for commits with a value in the given field that no earlier commit had."""
        seen: set[object] = set()

        def _unique(commit: Commit) -> bool:
            value = getattr(commit, field_name)
            include = value not in seen
            seen.add(value)
            return include

        return _unique

    def filter_commits(self, predicate: Callable[[Commit], bool]) -> list[Commit]:
        return [commit for commit in self.commits if predicate(commit)]

    def commit_to_link(self, commit: Commit) -> str:
        """Converts a commit to a Markdown link."""
        url = f"{GITHUB_URL}/{self.github.owner}/{self.github.name}/commit/{commit.sha}"
        return f"[{commit.short_sha}]({url})"

    def pull_request_to_link(self, pr_number: int) -> str:
        """Converts a pull request number to a Markdown link."""
        url = f"{GITHUB_URL}/{self.github.owner}/{self.github.name}/pull/{pr_number}"
        return f"[#{pr_number}]({url})"

    def replace_commit_header_pull_request_number(self, header: str) -> str:
        """Replaces the ``(#1234)`` reference added by the merge tooling with a Markdown link."""
        return PULL_REQUEST_REFERENCE_PATTERN.sub(lambda match: f"({self.pull_request_to_link(int(match.group(1)))})", header)

    def authors(self) -> list[str]:
        """Gets the sorted, unique authors of all commits in the release."""
        return sorted(commit.author for commit in self.filter_commits(self.unique("author")))

    def template_variables(self) -> dict[str, object]:
        """Variables and helpers passed to the release notes templates."""
        return {
            "version": self.version,
            "title": self.title,
            "date_stamp": self.date_stamp,
            "commits": self.commits,
            "filter_commits": self.filter_commits,
            "as_commit_groups": self.as_commit_groups,
            "include_in_release_notes": self.include_in_release_notes,
            "contains": self.contains,
            "authors": self.authors(),
            "commit_to_link": self.commit_to_link,
            "replace_commit_header_pull_request_number": self.replace_commit_header_pull_request_number,
        }
