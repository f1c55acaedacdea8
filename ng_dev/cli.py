"""Defines the ng-dev Command Line Interface (CLI) using Typer."""

import typer
from dotenv import load_dotenv
from typer import Option
from typing_extensions import Annotated

from ng_dev.caretaker.cli import caretaker_app
from ng_dev.commit_message.cli import commit_message_app
from ng_dev.configuration.env import get_settings
from ng_dev.format.cli import format_app
from ng_dev.misc.cli import misc_app
from ng_dev.ngbot.cli import ngbot_app
from ng_dev.pr.cli import pr_app
from ng_dev.pullapprove.cli import pullapprove_app
from ng_dev.release.cli import release_app
from ng_dev.utils.git_client import GitCommandError, get_repo_base_dir
from ng_dev.utils.logging import configure_logging

load_dotenv()

typer_app = typer.Typer(pretty_exceptions_show_locals=False, no_args_is_help=True)


@typer_app.callback()
def main_callback(
    ctx: typer.Context,
    log_level: Annotated[str | None, Option(help="Log level for diagnostic output on stderr, e.g. DEBUG.")] = None,
    github_token: Annotated[
        str | None, Option(envvar="GITHUB_TOKEN", help="GitHub token used for authenticated API requests and git pushes.")
    ] = None,
) -> None:
    """Developer operations tooling for caretaking, commit linting, pull request merging and releasing."""
    ctx.ensure_object(dict)
    ctx.obj["github_token"] = github_token
    try:
        log_file_dir = get_repo_base_dir()
    except GitCommandError:
        # Outside of a repository there is no place for the debug log file.
        log_file_dir = None
    configure_logging(log_level or get_settings().NG_DEV_LOG_LEVEL, log_file_dir)


typer_app.add_typer(caretaker_app, name="caretaker")
typer_app.add_typer(commit_message_app, name="commit-message")
typer_app.add_typer(format_app, name="format")
typer_app.add_typer(misc_app, name="misc")
typer_app.add_typer(ngbot_app, name="ngbot")
typer_app.add_typer(pr_app, name="pr")
typer_app.add_typer(pullapprove_app, name="pullapprove")
typer_app.add_typer(release_app, name="release")


if __name__ == "__main__":
    typer_app()
