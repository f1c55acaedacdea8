"""Commands formatting the files of the repository."""

import typer
from typer import Argument, Option
from typing_extensions import Annotated

from ng_dev.configuration.context import NgDevContext, exit_on_cli_error, get_cli_context
from ng_dev.configuration.loader import assert_valid_format_config
from ng_dev.format.format import check_files, format_files
from ng_dev.format.formatters import get_active_formatters

format_app = typer.Typer(help="Format source files with the configured formatters.")

CheckOption = Annotated[
    bool | None, Option("--check/--no-check", help="Check formatting rather than updating code format. Defaults to true on CI.")
]


def _run(context: NgDevContext, files: list[str], check: bool | None) -> None:
    formatters = get_active_formatters(context.base_dir, assert_valid_format_config(context.config))
    is_check = context.is_ci if check is None else check
    if is_check:
        raise typer.Exit(check_files(formatters, files, context.is_ci))
    raise typer.Exit(format_files(formatters, files))


@format_app.command(name="all")
@exit_on_cli_error
def all_cli(ctx: typer.Context, check: CheckOption = None) -> None:
    """Run the formatter on all files in the repository."""
    context = get_cli_context(ctx)
    _run(context, context.git_client.all_files(), check)


@format_app.command(name="changed")
@exit_on_cli_error
def changed_cli(
    ctx: typer.Context,
    sha_or_ref: Annotated[str | None, Argument(help="The sha or ref to compare against. Defaults to the main branch.")] = None,
    check: CheckOption = None,
) -> None:
    """Run the formatter on files changed since the provided sha or ref."""
    context = get_cli_context(ctx)
    sha = sha_or_ref or context.github_config.main_branch_name
    _run(context, context.git_client.all_changes_files_since(sha), check)


@format_app.command(name="staged")
@exit_on_cli_error
def staged_cli(ctx: typer.Context, check: CheckOption = None) -> None:
    """Run the formatter on all staged files."""
    context = get_cli_context(ctx)
    _run(context, context.git_client.all_staged_files(), check)


@format_app.command(name="files")
@exit_on_cli_error
def files_cli(
    ctx: typer.Context,
    files: Annotated[list[str], Argument(help="The files to run the formatter on.")],
    check: CheckOption = None,
) -> None:
    """Run the formatter on the provided files."""
    _run(get_cli_context(ctx), files, check)
