"""Helpers for running external commands as child processes."""

import os
import subprocess
from dataclasses import dataclass
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)


class CommandFailedError(Exception):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, command: list[str], status: int, stdout: str, stderr: str) -> None:
        """Initializes the exception with the command and its captured output."""
        super().__init__(f"Command failed with status {status}: {' '.join(command)}")
        self.command = command
        self.status = status
        self.stdout = stdout
        self.stderr = stderr


@dataclass(frozen=True)
class SpawnResult:
    """Outcome of a completed child process."""

    status: int
    stdout: str
    stderr: str


def run_command(
    command: list[str],
    cwd: Path | None = None,
    env: dict[str, str] | None = None,
    check: bool = True,
) -> SpawnResult:
    """Runs a command to completion, capturing its output.

    Raises CommandFailedError for a non-zero exit status unless check is False.
    """
    logger.debug("Running command", command=command, cwd=str(cwd) if cwd else None)
    process_env = {**os.environ, **env} if env else None
    result = subprocess.run(command, cwd=cwd, env=process_env, capture_output=True, text=True)
    logger.debug("Command completed", command=command, status=result.returncode)
    if check and result.returncode != 0:
        raise CommandFailedError(command, result.returncode, result.stdout, result.stderr)
    return SpawnResult(result.returncode, result.stdout, result.stderr)


def run_interactive(command: list[str], cwd: Path | None = None) -> int:
    """Runs a command attached to the current terminal and returns its exit status."""
    logger.debug("Running interactive command", command=command)
    return subprocess.run(command, cwd=cwd).returncode
