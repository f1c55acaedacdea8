"""Unit tests for parsing commit messages."""

from unittest.mock import MagicMock

from ng_dev.commit_message.parse import (
    GIT_LOG_SEPARATOR,
    get_commits_in_range,
    parse_commit_from_git_log,
    parse_commit_message,
)


def test_parse_header_parts() -> None:
    """Test that type, scope and summary are split from the header."""
    commit = parse_commit_message("feat(core): add a new feature\n\nBody of the commit message.")
    assert commit.type == "feat"
    assert commit.scope == "core"
    assert commit.summary == "add a new feature"
    assert commit.header == "feat(core): add a new feature"
    assert commit.body.strip() == "Body of the commit message."


def test_parse_header_without_scope() -> None:
    """Test that a header without a scope has an empty scope."""
    commit = parse_commit_message("docs: update readme")
    assert commit.type == "docs"
    assert commit.scope == ""
    assert commit.summary == "update readme"
    assert commit.body == ""


def test_parse_header_not_matching_format() -> None:
    """Test that a header not following the format leaves type and scope empty."""
    commit = parse_commit_message("Update things")
    assert commit.type == ""
    assert commit.scope == ""
    assert commit.header == "Update things"


def test_parse_breaking_change_and_deprecation_notes() -> None:
    """Test that breaking change and deprecation notes are collected from the footer."""
    message = (
        "feat(router): remove old api\n\n"
        "The old API was replaced.\n\n"
        "BREAKING CHANGE: The old API is gone.\n"
        "Use the new API instead.\n"
        "DEPRECATED: The helper is deprecated."
    )
    commit = parse_commit_message(message)
    assert len(commit.breaking_changes) == 1
    assert commit.breaking_changes[0].text == "The old API is gone.\nUse the new API instead."
    assert len(commit.deprecations) == 1
    assert commit.deprecations[0].text == "The helper is deprecated."
    assert "BREAKING CHANGE" not in commit.body
    assert commit.footer.startswith("BREAKING CHANGE:")


def test_parse_fixup_squash_and_revert() -> None:
    """Test that fixup, squash and revert prefixes are detected."""
    fixup = parse_commit_message("fixup! feat(core): add a new feature")
    assert fixup.is_fixup is True
    assert fixup.header == "feat(core): add a new feature"

    squash = parse_commit_message("squash! fix(core): fix it")
    assert squash.is_squash is True
    assert squash.header == "fix(core): fix it"

    revert = parse_commit_message('revert: "feat(core): add a new feature"')
    assert revert.is_revert is True


def test_parse_strips_comments_and_scissors() -> None:
    """Test that comment lines and everything below the scissors line are ignored."""
    message = (
        "fix(core): handle errors\n"
        "# Please enter the commit message\n\n"
        "Errors are now handled.\n"
        "# ------------------------ >8 ------------------------\n"
        "diff --git a/file b/file"
    )
    commit = parse_commit_message(message)
    assert "Please enter" not in commit.full_text
    assert "diff --git" not in commit.full_text
    assert commit.body.strip() == "Errors are now handled."


def test_parse_body_without_linking() -> None:
    """Test that GitHub issue links are removed from the body without linking."""
    commit = parse_commit_message("fix(core): handle errors\n\nThis fixes #123 for everyone.")
    assert "#123" in commit.body
    assert "#123" not in commit.body_without_linking


def test_parse_commit_from_git_log() -> None:
    """Test that the SHA and author printed by git log are parsed."""
    commit = parse_commit_from_git_log("\nabcdef1234567\nJane Doe\nfix(core): handle errors\n\nBody text here.\n")
    assert commit.sha == "abcdef1234567"
    assert commit.short_sha == "abcdef1"
    assert commit.author == "Jane Doe"
    assert commit.type == "fix"


def test_get_commits_in_range() -> None:
    """Test that every commit printed by git log in the range is parsed."""
    git = MagicMock()
    git.run.return_value.stdout = (
        f"sha2\nJane\nfix(core): second\n{GIT_LOG_SEPARATOR}\n" f"sha1\nJohn\nfeat(core): first\n{GIT_LOG_SEPARATOR}\n"
    )
    commits = get_commits_in_range(git, "v1.0.0", "HEAD")
    assert [commit.sha for commit in commits] == ["sha2", "sha1"]
    assert [commit.author for commit in commits] == ["Jane", "John"]
    args = git.run.call_args.args[0]
    assert args[0] == "log"
    assert args[-1] == "v1.0.0..HEAD"
