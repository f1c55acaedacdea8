"""Unit tests for generating release notes."""

from datetime import date
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from ng_dev.commit_message.parse import Commit, parse_commit_message
from ng_dev.configuration.models import GithubConfig, ReleaseNotesConfig
from ng_dev.release.notes.context import RenderContext
from ng_dev.release.notes.release_notes import NoSemverTagError, ReleaseNotes, get_latest_semver_tag
from ng_dev.release.versioning import SemVer
from ng_dev.utils.constants import CHANGELOG_SPLIT_MARKER

GITHUB = GithubConfig(owner="angular", name="angular")


def commit(message: str, sha: str = "abcdef1234567890", author: str = "Alice") -> Commit:
    return parse_commit_message(message, sha=sha, author=author)


@pytest.fixture
def commits() -> list[Commit]:
    return [
        commit("fix(router): handle empty paths (#12)", sha="1111111aaaa", author="Bob"),
        commit("feat(core): add signals", sha="2222222bbbb", author="Alice"),
        commit("docs(core): fix typo", sha="3333333cccc", author="Carol"),
        commit("fix(compiler): handle pipes", sha="4444444dddd", author="Alice"),
        commit("fix(dev-infra): update tooling", sha="5555555eeee", author="Dan"),
    ]


def test_commit_groups_sorted_with_group_order(commits: list[Commit]) -> None:
    """Test that groups are sorted alphabetically after the configured group order."""
    context = RenderContext(commits=commits, github=GITHUB, version="10.1.0", group_order=["router"])
    groups = context.as_commit_groups(commits)
    assert [group.title for group in groups] == ["router", "compiler", "core", "dev-infra"]
    assert [c.sha for c in groups[2].commits] == ["2222222bbbb", "3333333cccc"]


def test_include_in_release_notes_filters_types_and_hidden_scopes(commits: list[Commit]) -> None:
    """Test that hidden types and scopes are excluded from the release notes."""
    context = RenderContext(commits=commits, github=GITHUB, version="10.1.0", hidden_scopes=["dev-infra"])
    included = context.filter_commits(context.include_in_release_notes())
    assert [c.header for c in included] == [
        "fix(router): handle empty paths (#12)",
        "feat(core): add signals",
        "fix(compiler): handle pipes",
    ]


def test_links(commits: list[Commit]) -> None:
    """Test the Markdown links for commits and pull request references."""
    context = RenderContext(commits=commits, github=GITHUB, version="10.1.0")
    assert context.commit_to_link(commits[0]) == "[1111111](https://github.com/angular/angular/commit/1111111aaaa)"
    assert (
        context.replace_commit_header_pull_request_number("fix(router): handle empty paths (#12)")
        == "fix(router): handle empty paths ([#12](https://github.com/angular/angular/pull/12))"
    )
    assert context.replace_commit_header_pull_request_number("fix(router): no reference") == "fix(router): no reference"


def test_authors_are_unique_and_sorted(commits: list[Commit]) -> None:
    """Test that every author is listed once, in sorted order."""
    context = RenderContext(commits=commits, github=GITHUB, version="10.1.0")
    assert context.authors() == ["Alice", "Bob", "Carol", "Dan"]


def test_changelog_entry(commits: list[Commit]) -> None:
    """Test the rendered changelog entry."""
    breaking = commit(
        "feat(core): remove legacy API\n\nBREAKING CHANGE: The legacy API was removed.",
        sha="6666666ffff",
        author="Eve",
    )
    notes = ReleaseNotes(
        SemVer.parse("11.0.0"),
        [*commits, breaking],
        GITHUB,
        ReleaseNotesConfig(hidden_scopes=["dev-infra"]),
        release_date=date(2021, 3, 4),
    )
    entry = notes.get_changelog_entry()
    assert entry.startswith('<a name="11.0.0"></a>\n# 11.0.0 (2021-03-04)')
    assert "### router" in entry
    assert "### dev-infra" not in entry
    assert "docs(core): fix typo" not in entry
    assert "## Breaking Changes" in entry
    assert "The legacy API was removed." in entry
    assert "## Deprecations" not in entry
    assert "Alice, Bob, Carol, Dan and Eve" in entry
    assert notes.get_commit_count_in_release_notes() == 4


def test_release_title_is_prompted_once(monkeypatch: pytest.MonkeyPatch, commits: list[Commit]) -> None:
    """Test that the release title is asked for once and included in the entry."""
    prompt = MagicMock(return_value="Signals")
    monkeypatch.setattr("ng_dev.release.notes.release_notes.prompt_input", prompt)
    notes = ReleaseNotes(
        SemVer.parse("11.0.0"), commits, GITHUB, ReleaseNotesConfig(use_release_title=True), release_date=date(2021, 3, 4)
    )
    assert '# 11.0.0 "Signals" (2021-03-04)' in notes.get_changelog_entry()
    notes.get_github_release_entry()
    prompt.assert_called_once()


def test_prepend_entry_to_changelog(tmp_path: Path, commits: list[Commit]) -> None:
    """Test that entries are prepended above the previous entries, separated by the split marker."""
    notes = ReleaseNotes(SemVer.parse("10.1.0"), commits, GITHUB, ReleaseNotesConfig(), release_date=date(2021, 3, 4))
    changelog = notes.prepend_entry_to_changelog(tmp_path)
    assert changelog.read_text().startswith('<a name="10.1.0"></a>')
    assert CHANGELOG_SPLIT_MARKER not in changelog.read_text()

    newer = ReleaseNotes(SemVer.parse("10.1.1"), commits[:1], GITHUB, ReleaseNotesConfig(), release_date=date(2021, 3, 5))
    content = newer.prepend_entry_to_changelog(tmp_path).read_text()
    assert content.startswith('<a name="10.1.1"></a>')
    assert content.index(CHANGELOG_SPLIT_MARKER) < content.index('<a name="10.1.0"></a>')


def test_get_latest_semver_tag() -> None:
    """Test that the highest stable version tag is found."""
    git = MagicMock()
    git.list_tags.return_value = ["v10.0.0", "10.2.0-rc.0", "10.1.3", "not-a-version", "10.1.10"]
    assert get_latest_semver_tag(git) == "10.1.10"


def test_get_latest_semver_tag_without_stable_tags() -> None:
    """Test that a repository without stable tags raises NoSemverTagError."""
    git = MagicMock()
    git.list_tags.return_value = ["11.0.0-next.0", "latest"]
    with pytest.raises(NoSemverTagError):
        get_latest_semver_tag(git)
