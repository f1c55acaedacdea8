"""Commands validating and building commit messages."""

import os
from pathlib import Path

import typer
from typer import Argument, Option
from typing_extensions import Annotated

from ng_dev.commit_message.restore import restore_commit_message
from ng_dev.commit_message.validate_file import validate_file
from ng_dev.commit_message.validate_range import validate_commit_range
from ng_dev.commit_message.wizard import run_wizard
from ng_dev.configuration.context import exit_on_cli_error, get_cli_context
from ng_dev.configuration.loader import assert_valid_commit_message_config

commit_message_app = typer.Typer(help="Commit message validation and creation helpers.")

DEFAULT_COMMIT_MESSAGE_FILE = Path(".git/COMMIT_EDITMSG")


@commit_message_app.command(name="validate-file")
@exit_on_cli_error
def validate_file_cli(
    ctx: typer.Context,
    file: Annotated[Path | None, Option(help="The path of the commit message file.")] = None,
    file_env_variable: Annotated[
        str | None, Option(help="The environment variable holding the path of the commit message file, e.g. HUSKY_GIT_PARAMS.")
    ] = None,
    error: Annotated[
        bool | None, Option("--error/--no-error", help="Whether invalid commit messages fail the commit instead of only warning.")
    ] = None,
) -> None:
    """Validate the most recent commit message."""
    context = get_cli_context(ctx)
    config = assert_valid_commit_message_config(context.config)
    file_path = file
    if file_path is None and file_env_variable:
        value = os.environ.get(file_env_variable, "")
        if not value:
            typer.echo(f"Provided environment variable '{file_env_variable}' is not set or empty.", err=True)
            raise typer.Exit(1)
        file_path = Path(value.split(" ")[0])
    if file_path is None:
        file_path = DEFAULT_COMMIT_MESSAGE_FILE
    if not file_path.is_absolute():
        file_path = context.base_dir / file_path

    is_error_mode = error
    if is_error_mode is None:
        is_error_mode = context.user_config.commit_message.error_on_invalid_message or context.is_ci
    raise typer.Exit(validate_file(file_path, config, is_error_mode))


@commit_message_app.command(name="validate-range")
@exit_on_cli_error
def validate_range_cli(
    ctx: typer.Context,
    start_ref: Annotated[str, Argument(help="The exclusive start of the commit range.")],
    end_ref: Annotated[str, Argument(help="The inclusive end of the commit range.")] = "HEAD",
) -> None:
    """Validate every commit message in a range of commits."""
    context = get_cli_context(ctx)
    config = assert_valid_commit_message_config(context.config)
    raise typer.Exit(validate_commit_range(context.git_client, config, start_ref, end_ref))


@commit_message_app.command(name="wizard")
@exit_on_cli_error
def wizard_cli(
    ctx: typer.Context,
    file_path: Annotated[Path, Argument(help="The path of the commit message file.")],
    source: Annotated[str | None, Argument(help="The source of the commit message as passed by git.")] = None,
    commit_sha: Annotated[str | None, Argument(help="The sha of the commit being amended, if any.")] = None,
) -> None:
    """Build a commit message interactively."""
    context = get_cli_context(ctx)
    config = assert_valid_commit_message_config(context.config)
    run_wizard(file_path, config, context.user_config, source)


@commit_message_app.command(name="restore-commit-message-draft")
def restore_commit_message_draft_cli(
    file_path: Annotated[Path, Argument(help="The path of the commit message file.")],
    source: Annotated[str | None, Argument(help="The source of the commit message as passed by git.")] = None,
    commit_sha: Annotated[str | None, Argument(help="The sha of the commit being amended, if any.")] = None,
) -> None:
    """Restore a commit message draft saved by a failed validation."""
    restore_commit_message(file_path, source)
