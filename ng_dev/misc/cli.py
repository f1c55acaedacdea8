"""Miscellaneous commands."""

from pathlib import Path

import typer
from typer import Argument
from typing_extensions import Annotated

from ng_dev.configuration.context import exit_on_cli_error, get_cli_context
from ng_dev.configuration.loader import assert_valid_release_config
from ng_dev.misc.build_and_link import build_and_link

misc_app = typer.Typer(help="Miscellaneous helpers.")


@misc_app.command(name="build-and-link")
@exit_on_cli_error
def build_and_link_cli(
    ctx: typer.Context,
    project_root: Annotated[Path, Argument(help="The root of the project to link the release packages into.")],
) -> None:
    """Build the release output, register the outputs as linked and link them via yarn into the provided project."""
    context = get_cli_context(ctx)
    config = assert_valid_release_config(context.config)
    raise typer.Exit(build_and_link(config.build_command, context.base_dir, project_root.resolve()))
