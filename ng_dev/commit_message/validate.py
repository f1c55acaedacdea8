"""Validates commit messages against the configured commit message rules."""

import re
from dataclasses import dataclass, field
from typing import Callable

from ng_dev.commit_message.config import COMMIT_TYPES, ScopeRequirement
from ng_dev.commit_message.parse import Commit, parse_commit_message
from ng_dev.configuration.models import CommitMessageConfig
from ng_dev.utils.console import error

COMMIT_BODY_URL_LINE_PATTERN = re.compile(r"^https?://.*$")
"""Pattern matching a body line that only contains a URL."""

INCORRECT_BREAKING_CHANGE_BODY_PATTERN = re.compile(r"^(BREAKING CHANGE[^:]|BREAKING-CHANGE|BREAKING[ -]CHANGES)", re.MULTILINE)
"""Pattern matching misspelled breaking change markers, e.g. ``BREAKING CHANGES:``."""

INCORRECT_DEPRECATION_BODY_PATTERN = re.compile(r"^(DEPRECATED[^:]|DEPRECATIONS|DEPRECATE:|DEPRECATES)", re.MULTILINE)
"""Pattern matching misspelled deprecation markers, e.g. ``DEPRECATIONS:``."""


@dataclass
class ValidateCommitMessageResult:
    """Outcome of validating a single commit message."""

    valid: bool
    commit: Commit
    errors: list[str] = field(default_factory=list)


def _collect_errors(commit: Commit, config: CommitMessageConfig, disallow_squash: bool, non_fixup_commit_headers: list[str] | None) -> list[str]:
    """Runs the checks in order and returns the errors of the first failing check."""
    if commit.is_revert:
        return []

    if commit.is_squash:
        if disallow_squash:
            return ["The commit must be manually squashed into the target commit"]
        return []

    if commit.is_fixup:
        if non_fixup_commit_headers is not None and commit.header not in non_fixup_commit_headers:
            candidates = "".join(f"\n      {header}" for header in non_fixup_commit_headers) or "-"
            return [f"Unable to find match for fixup commit among prior commits: {candidates}"]
        return []

    if len(commit.header) > config.max_line_length:
        return [f"The commit message header is longer than {config.max_line_length} characters"]

    if not commit.type:
        return ["The commit message header does not match the expected format."]

    commit_type = COMMIT_TYPES.get(commit.type)
    if commit_type is None:
        return [f"'{commit.type}' is not an allowed type.\n => TYPES: {', '.join(COMMIT_TYPES)}"]

    if commit_type.scope == ScopeRequirement.FORBIDDEN and commit.scope:
        return [f"Scopes are forbidden for commits with type '{commit.type}', but a scope of '{commit.scope}' was provided."]

    if commit_type.scope == ScopeRequirement.REQUIRED and not commit.scope:
        return [f"Scopes are required for commits with type '{commit.type}', but no scope was provided."]

    if commit.scope and commit.scope not in config.scopes:
        return [f"'{commit.scope}' is not an allowed scope.\n => SCOPES: {', '.join(config.scopes)}"]

    # Release commits do not require a body.
    if commit.type == "release":
        return []

    all_non_header_content = f"{commit.body.strip()}\n{commit.footer.strip()}"
    if commit.type not in config.min_body_length_type_excludes and len(all_non_header_content) < config.min_body_length:
        return [f"The commit message body does not meet the minimum length of {config.min_body_length} characters"]

    for line in commit.body.split("\n"):
        if len(line) > config.max_line_length and not COMMIT_BODY_URL_LINE_PATTERN.match(line):
            return [f"The commit message body contains lines greater than {config.max_line_length} characters."]

    if INCORRECT_BREAKING_CHANGE_BODY_PATTERN.search(commit.full_text):
        return ["The commit message body contains an invalid breaking change note."]

    if INCORRECT_DEPRECATION_BODY_PATTERN.search(commit.full_text):
        return ["The commit message body contains an invalid deprecation note."]

    return []


def validate_commit_message(
    commit_message: str | Commit,
    config: CommitMessageConfig,
    disallow_squash: bool = False,
    non_fixup_commit_headers: list[str] | None = None,
) -> ValidateCommitMessageResult:
    """Validates a commit message.

    Args:
        commit_message: The raw commit message or an already parsed commit
        config: The commit message rules of the repository
        disallow_squash: Whether ``squash!`` commits are rejected
        non_fixup_commit_headers: Headers a ``fixup!`` commit must match; fixups are not checked when None
    """
    commit = parse_commit_message(commit_message) if isinstance(commit_message, str) else commit_message
    errors = _collect_errors(commit, config, disallow_squash, non_fixup_commit_headers)
    return ValidateCommitMessageResult(valid=not errors, commit=commit, errors=errors)


def print_validation_errors(errors: list[str], print_fn: Callable[[str], None] = error) -> None:
    """Prints the validation errors followed by the expected commit message format."""
    print_fn(f"Error{'' if len(errors) == 1 else 's'}:")
    for line in errors:
        print_fn(f"  {line}")
    print_fn("")
    print_fn("The expected format for a commit is: ")
    print_fn("<type>(<scope>): <summary>")
    print_fn("")
    print_fn("<body>")
    print_fn("")
    print_fn("BREAKING CHANGE: <breaking change summary>")
    print_fn("")
    print_fn("<breaking change description>")
    print_fn("")
