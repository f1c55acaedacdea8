"""Commands for the PullApprove configuration."""

import typer

from ng_dev.configuration.context import exit_on_cli_error, get_cli_context
from ng_dev.pullapprove.condition_evaluator import ConditionParseError
from ng_dev.pullapprove.group import ConditionEvaluationError
from ng_dev.pullapprove.verify import verify
from ng_dev.utils.console import error
from ng_dev.utils.constants import PULLAPPROVE_CONFIG_PATH

pullapprove_app = typer.Typer(help="Tooling for the PullApprove configuration.")


@pullapprove_app.command(name="verify")
@exit_on_cli_error
def verify_cli(ctx: typer.Context) -> None:
    """Verify the PullApprove config."""
    context = get_cli_context(ctx)
    config_path = context.base_dir / PULLAPPROVE_CONFIG_PATH
    if not config_path.is_file():
        error(f"No PullApprove config found at {config_path}")
        raise typer.Exit(1)
    try:
        succeeded = verify(context.base_dir, context.git_client.all_files())
    except (ConditionParseError, ConditionEvaluationError) as exc:
        error(str(exc))
        raise typer.Exit(1) from exc
    raise typer.Exit(0 if succeeded else 1)
