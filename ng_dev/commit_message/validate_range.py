"""Validates all commit messages in a git revision range."""

from ng_dev.commit_message.parse import Commit, get_commits_in_range
from ng_dev.commit_message.validate import print_validation_errors, validate_commit_message
from ng_dev.configuration.models import CommitMessageConfig
from ng_dev.utils.console import error, green, info, red
from ng_dev.utils.git_client import GitClient


def validate_commits(commits: list[Commit], config: CommitMessageConfig) -> list[tuple[str, list[str]]]:
    """Validates commits ordered most recent first, stopping at the first invalid commit.

    Fixup commits are valid only if they match the header of an older, non-fixup commit
    in the same range.
    """
    errors: list[tuple[str, list[str]]] = []
    for index, commit in enumerate(commits):
        non_fixup_commit_headers = None
        if commit.is_fixup:
            non_fixup_commit_headers = [older.header for older in commits[index + 1 :] if not older.is_fixup]
        result = validate_commit_message(commit, config, disallow_squash=True, non_fixup_commit_headers=non_fixup_commit_headers)
        if result.errors:
            errors.append((commit.header, result.errors))
        if not result.valid:
            break
    return errors


def validate_commit_range(git: GitClient, config: CommitMessageConfig, from_ref: str, to_ref: str) -> int:
    """Validates all commits in the range and returns the exit code."""
    commits = get_commits_in_range(git, from_ref, to_ref)
    info(f"Examining {len(commits)} commit(s) in the provided range: {from_ref}..{to_ref}")

    errors = validate_commits(commits, config)
    if not errors:
        info(green("√  All commit messages in range valid."))
        return 0

    error(red("✘  Invalid commit message"))
    for header, validation_errors in errors:
        error(header)
        print_validation_errors(validation_errors)
    return 1
