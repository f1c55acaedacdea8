"""Unit tests for commit message validation."""

from pathlib import Path

import pytest

from ng_dev.commit_message.draft import DRAFT_SUFFIX, load_commit_message_draft
from ng_dev.commit_message.parse import parse_commit_message
from ng_dev.commit_message.restore import restore_commit_message
from ng_dev.commit_message.validate import validate_commit_message
from ng_dev.commit_message.validate_file import validate_file
from ng_dev.commit_message.validate_range import validate_commits
from ng_dev.configuration.models import CommitMessageConfig

VALID_BODY = "This body explains the change in enough detail."


def test_valid_commit_message(commit_message_config: CommitMessageConfig) -> None:
    """Test that a well-formed commit message is valid."""
    result = validate_commit_message(f"feat(core): add a feature\n\n{VALID_BODY}", commit_message_config)
    assert result.valid is True
    assert result.errors == []


@pytest.mark.parametrize(
    "message,expected_error",
    [
        ("feat(core): " + "a" * 120 + f"\n\n{VALID_BODY}", "header is longer than 120 characters"),
        (f"Add a feature\n\n{VALID_BODY}", "does not match the expected format"),
        (f"bogus(core): add a feature\n\n{VALID_BODY}", "'bogus' is not an allowed type"),
        (f"ci(core): update config\n\n{VALID_BODY}", "Scopes are forbidden for commits with type 'ci'"),
        (f"feat: add a feature\n\n{VALID_BODY}", "Scopes are required for commits with type 'feat'"),
        (f"fix(compiler): fix a bug\n\n{VALID_BODY}", "'compiler' is not an allowed scope"),
        ("fix(core): fix a bug\n\nToo short", "does not meet the minimum length of 20 characters"),
        ("fix(core): fix a bug\n\n" + "a" * 121, "contains lines greater than 120 characters"),
        (f"feat(core): add a feature\n\n{VALID_BODY}\n\nBREAKING CHANGES: removed", "invalid breaking change note"),
        (f"feat(core): add a feature\n\n{VALID_BODY}\n\nDEPRECATIONS: removed", "invalid deprecation note"),
    ],
)
def test_invalid_commit_messages(message: str, expected_error: str, commit_message_config: CommitMessageConfig) -> None:
    """Test that each rule reports its error for a violating message."""
    result = validate_commit_message(message, commit_message_config)
    assert result.valid is False
    assert len(result.errors) == 1
    assert expected_error in result.errors[0]


def test_url_lines_may_exceed_max_line_length(commit_message_config: CommitMessageConfig) -> None:
    """Test that body lines consisting only of a URL are exempt from the line length."""
    message = f"docs: add reference\n\n{VALID_BODY}\nhttps://example.com/" + "a" * 130
    assert validate_commit_message(message, commit_message_config).valid is True


def test_release_commits_do_not_require_a_body(commit_message_config: CommitMessageConfig) -> None:
    """Test that release commits are valid without a body."""
    assert validate_commit_message("release: cut the v10.0.0 release", commit_message_config).valid is True


def test_min_body_length_type_excludes() -> None:
    """Test that excluded types do not need a body of the minimum length."""
    config = CommitMessageConfig(min_body_length=20, min_body_length_type_excludes=["docs"])
    assert validate_commit_message("docs: fix a typo", config).valid is True


def test_revert_commits_are_always_valid(commit_message_config: CommitMessageConfig) -> None:
    """Test that revert commits skip all checks."""
    assert validate_commit_message('revert: "bogus thing"', commit_message_config).valid is True


def test_squash_commits(commit_message_config: CommitMessageConfig) -> None:
    """Test that squash commits are only rejected when squash commits are disallowed."""
    message = "squash! fix(core): fix a bug"
    assert validate_commit_message(message, commit_message_config).valid is True
    result = validate_commit_message(message, commit_message_config, disallow_squash=True)
    assert result.valid is False
    assert "must be manually squashed" in result.errors[0]


def test_fixup_commits_must_match_prior_commit(commit_message_config: CommitMessageConfig) -> None:
    """Test that fixup commits must match the header of a prior non-fixup commit."""
    message = "fixup! fix(core): fix a bug"
    assert validate_commit_message(message, commit_message_config).valid is True
    assert validate_commit_message(message, commit_message_config, non_fixup_commit_headers=["fix(core): fix a bug"]).valid is True
    result = validate_commit_message(message, commit_message_config, non_fixup_commit_headers=["feat(core): other"])
    assert result.valid is False
    assert "Unable to find match for fixup commit" in result.errors[0]


def test_validate_commits_in_range(commit_message_config: CommitMessageConfig) -> None:
    """Test that fixups in a range are matched against older commits of the range."""
    commits = [
        parse_commit_message("fixup! fix(core): fix a bug"),
        parse_commit_message(f"fix(core): fix a bug\n\n{VALID_BODY}"),
    ]
    assert validate_commits(commits, commit_message_config) == []


def test_validate_commits_stops_at_first_invalid_commit(commit_message_config: CommitMessageConfig) -> None:
    """Test that range validation stops at the first invalid commit."""
    commits = [
        parse_commit_message("fixup! fix(core): unknown commit"),
        parse_commit_message("bogus: not checked"),
    ]
    errors = validate_commits(commits, commit_message_config)
    assert len(errors) == 1
    assert errors[0][0] == "fix(core): unknown commit"


def test_validate_file_saves_draft_for_invalid_message(tmp_path: Path, commit_message_config: CommitMessageConfig) -> None:
    """Test that an invalid message is saved as draft and only fails in error mode."""
    message_file = tmp_path / "COMMIT_EDITMSG"
    message_file.write_text("bogus commit message")
    assert validate_file(message_file, commit_message_config, is_error_mode=False) == 0
    assert load_commit_message_draft(message_file) == "bogus commit message"
    assert validate_file(message_file, commit_message_config, is_error_mode=True) == 1


def test_validate_file_deletes_draft_for_valid_message(tmp_path: Path, commit_message_config: CommitMessageConfig) -> None:
    """Test that a valid message removes a previously saved draft."""
    message_file = tmp_path / "COMMIT_EDITMSG"
    draft_file = tmp_path / f"COMMIT_EDITMSG{DRAFT_SUFFIX}"
    draft_file.write_text("old draft")
    message_file.write_text(f"fix(core): fix a bug\n\n{VALID_BODY}")
    assert validate_file(message_file, commit_message_config, is_error_mode=True) == 0
    assert not draft_file.exists()


def test_restore_commit_message(tmp_path: Path) -> None:
    """Test that a draft is restored unless git already provided a message."""
    message_file = tmp_path / "COMMIT_EDITMSG"
    message_file.write_text("")
    (tmp_path / f"COMMIT_EDITMSG{DRAFT_SUFFIX}").write_text("fix(core): saved message")

    restore_commit_message(message_file, source="message")
    assert message_file.read_text() == ""

    restore_commit_message(message_file)
    assert message_file.read_text() == "fix(core): saved message"
