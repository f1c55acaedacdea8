"""Interactive wizard that builds a commit message from prompts."""

from pathlib import Path

import structlog

from ng_dev.commit_message.config import COMMIT_TYPES, CommitType, ScopeRequirement
from ng_dev.configuration.models import CommitMessageConfig, NgDevUserConfig
from ng_dev.utils.console import info, prompt_input, prompt_select

logger = structlog.get_logger(__name__)

DEFAULT_COMMIT_MESSAGE = (
    "<type>(<scope>): <summary>\n\n"
    "# <Describe the motivation behind this change - explain WHY you are making this change. Wrap all\n"
    "#  lines at 100 characters.>\n\n"
)
"""Commit message left in place if the wizard is cancelled."""

NO_SCOPE_CHOICE = "<no scope>"


def prompt_for_commit_message_type() -> CommitType:
    """Prompts for the type of the commit."""
    info("The type of change in the commit. Allows a reader to know the effect of the change,")
    info("whether it brings a new feature, adds additional testing, documents the project, etc.")
    commit_types = list(COMMIT_TYPES.values())
    index = prompt_select("Select a type for the commit:", [f"{t.name} - {t.description}" for t in commit_types])
    return commit_types[index]


def prompt_for_commit_message_scope(commit_type: CommitType, config: CommitMessageConfig) -> str | None:
    """Prompts for the scope of the commit, or returns None if the type has no scope."""
    if commit_type.scope == ScopeRequirement.FORBIDDEN:
        info(f"Skipping scope selection as the '{commit_type.name}' type does not allow scopes")
        return None
    info("The area of the repository the changes in this commit most affects.")
    choices = list(config.scopes)
    if commit_type.scope == ScopeRequirement.OPTIONAL:
        choices.insert(0, NO_SCOPE_CHOICE)
    scope = choices[prompt_select("Select a scope for the commit:", choices)]
    return None if scope == NO_SCOPE_CHOICE else scope


def build_commit_message(config: CommitMessageConfig) -> str:
    """Builds a commit message header from the answers to the prompts."""
    info("Just a few questions to start building the commit message!")
    commit_type = prompt_for_commit_message_type()
    scope = prompt_for_commit_message_scope(commit_type, config)
    info("Provide a short summary of what the changes in the commit do")
    summary = prompt_input("Provide a short summary of the commit")
    return f"{commit_type.name}{f'({scope})' if scope else ''}: {summary}\n\n"


def run_wizard(file_path: Path, config: CommitMessageConfig, user_config: NgDevUserConfig, source: str | None = None) -> None:
    """Runs the wizard and writes the built commit message to file_path."""
    if user_config.commit_message.disable_wizard:
        logger.debug("Skipping commit message wizard due to enabled `commit_message.disable_wizard` option in user config.")
        return
    if source is not None:
        info(f"Skipping commit message wizard because the commit was created via '{source}' source")
        return
    # The default message stays in place if the operator aborts the prompts.
    file_path.write_text(DEFAULT_COMMIT_MESSAGE, encoding="utf-8")
    file_path.write_text(build_commit_message(config), encoding="utf-8")
