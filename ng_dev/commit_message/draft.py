"""Saves and restores drafts of rejected commit messages."""

from pathlib import Path

DRAFT_SUFFIX = ".ngDevSave"


def _draft_path(base_path: Path) -> Path:
    return base_path.with_name(base_path.name + DRAFT_SUFFIX)


def load_commit_message_draft(base_path: Path) -> str:
    """Loads the commit message draft saved for the commit message file, if any."""
    draft_path = _draft_path(base_path)
    if draft_path.exists():
        return draft_path.read_text(encoding="utf-8")
    return ""


def delete_commit_message_draft(base_path: Path) -> None:
    """Removes the commit message draft of the commit message file."""
    _draft_path(base_path).unlink(missing_ok=True)


def save_commit_message_draft(base_path: Path, commit_message: str) -> None:
    """Saves a commit message draft for retrieval on the next commit attempt."""
    _draft_path(base_path).write_text(commit_message, encoding="utf-8")
