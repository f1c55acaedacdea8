"""Terminal output and prompt helpers shared by the ng-dev commands."""

import sys

import typer


def green(text: str) -> str:
    """Styles text green."""
    return typer.style(text, fg=typer.colors.GREEN)


def red(text: str) -> str:
    """Styles text red."""
    return typer.style(text, fg=typer.colors.RED)


def yellow(text: str) -> str:
    """Styles text yellow."""
    return typer.style(text, fg=typer.colors.YELLOW)


def bold(text: str) -> str:
    """Styles text bold."""
    return typer.style(text, bold=True)


def info(message: str = "") -> None:
    """Prints an informational message to stdout."""
    typer.echo(message)


def warn(message: str) -> None:
    """Prints a warning to stderr."""
    typer.echo(yellow(message), err=True)


def error(message: str) -> None:
    """Prints an error to stderr."""
    typer.echo(red(message), err=True)


def is_interactive() -> bool:
    """Whether the operator can answer prompts on this terminal."""
    return sys.stdin.isatty()


def prompt_confirm(message: str, default: bool = False) -> bool:
    """Asks the operator a yes/no question."""
    return typer.confirm(message, default=default)


def prompt_input(message: str, default: str | None = None) -> str:
    """Asks the operator for a free-form value."""
    value: str = typer.prompt(message, default=default) if default is not None else typer.prompt(message)
    return value


def prompt_select(message: str, choices: list[str]) -> int:
    """Asks the operator to pick one of the choices and returns its index."""
    typer.echo(message)
    for index, choice in enumerate(choices, start=1):
        typer.echo(f"  {index}) {choice}")
    selected: int = typer.prompt("Select an option", type=typer.IntRange(1, len(choices)))
    return selected - 1


def blue(text: str) -> str:
    """Styles text blue."""
    return typer.style(text, fg=typer.colors.BLUE)
