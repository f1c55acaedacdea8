"""Commands assisting the caretaker of the repository."""

import asyncio

import typer

from ng_dev.caretaker.check.check import check_service_statuses
from ng_dev.configuration.context import exit_on_cli_error, get_cli_context
from ng_dev.configuration.loader import assert_valid_caretaker_config

caretaker_app = typer.Typer(help="Tooling to assist the caretaker of the repository.")


@caretaker_app.command(name="check")
@exit_on_cli_error
def check_cli(ctx: typer.Context) -> None:
    """Check the status of information the caretaker manages for the repository."""
    context = get_cli_context(ctx)
    assert_valid_caretaker_config(context.config)
    asyncio.run(check_service_statuses(context.git_client, context.github, context.github_config, context.config))
