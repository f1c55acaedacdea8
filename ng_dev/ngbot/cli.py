"""Commands for the NgBot configuration."""

import typer

from ng_dev.configuration.context import get_cli_context
from ng_dev.ngbot.verify import verify_ngbot_config

ngbot_app = typer.Typer(help="Tooling for the NgBot configuration.")


@ngbot_app.command(name="verify")
def verify_cli(ctx: typer.Context) -> None:
    """Verify the NgBot config."""
    raise typer.Exit(verify_ngbot_config(get_cli_context(ctx).base_dir))
