"""Validates the commit message file written by git before a commit is created."""

from pathlib import Path

import structlog

from ng_dev.commit_message.draft import delete_commit_message_draft, save_commit_message_draft
from ng_dev.commit_message.validate import print_validation_errors, validate_commit_message
from ng_dev.configuration.models import CommitMessageConfig
from ng_dev.utils.console import error, green, info, red, yellow

logger = structlog.get_logger(__name__)


def validate_file(file_path: Path, config: CommitMessageConfig, is_error_mode: bool) -> int:
    """Validates the commit message at file_path and returns the exit code.

    Invalid messages are saved as a draft so they can be restored on the next commit
    attempt. They only fail the command in error mode.
    """
    commit_message = file_path.read_text(encoding="utf-8")
    result = validate_commit_message(commit_message, config)
    if result.valid:
        info(f"{green('√')}  Valid commit message")
        delete_commit_message_draft(file_path)
        return 0

    print_fn = error if is_error_mode else info
    print_fn(f"{red('✘') if is_error_mode else yellow('!')}  Invalid commit message")
    print_validation_errors(result.errors, print_fn)
    if is_error_mode:
        print_fn(red("Aborting commit attempt due to invalid commit message."))
        print_fn(red("Commit message aborted as failure rather than warning due to local configuration."))
    else:
        print_fn(yellow("Before this commit can be merged into the upstream repository, it must be"))
        print_fn(yellow("amended to follow commit message guidelines."))

    save_commit_message_draft(file_path, commit_message)
    logger.debug("Saved commit message draft", file_path=str(file_path))
    return 1 if is_error_mode else 0
