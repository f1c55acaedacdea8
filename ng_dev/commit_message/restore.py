"""Restores a previously rejected commit message when git prepares a new one."""

from pathlib import Path

import structlog

from ng_dev.commit_message.draft import load_commit_message_draft

logger = structlog.get_logger(__name__)

_SOURCE_DESCRIPTIONS = {
    "message": "A commit message was already provided via the command with a -m or -F flag",
    "template": "A commit message was already provided via the -t flag or config.template setting",
    "squash": "A commit message was already provided as a merge action or via .git/MERGE_MSG",
    "commit": "A commit message was already provided through a revision specified via --fixup, -c, -C or --amend flag",
}


def restore_commit_message(file_path: Path, source: str | None = None) -> None:
    """Restores the commit message draft into file_path unless git provided a message already.

    The source is the commit message source passed to the ``prepare-commit-msg`` hook.
    """
    if source:
        logger.debug(_SOURCE_DESCRIPTIONS.get(source, "A commit message was already provided"), source=source)
        return
    commit_message = load_commit_message_draft(file_path)
    if commit_message:
        file_path.write_text(commit_message, encoding="utf-8")
        logger.debug("Restored commit message draft", file_path=str(file_path))
