"""Formatter running prettier against TypeScript and JavaScript files."""

from functools import cached_property
from pathlib import Path

from ng_dev.format.formatters.base import Formatter, FormatterAction, FormatterActionConfig
from ng_dev.utils.child_process import run_command
from ng_dev.utils.console import error


def _format_failed(file: str, code: int, stdout: str, stderr: str) -> bool:
    if code != 0:
        error(f"Error running prettier on: {file}")
        error(stderr)
        error("")
        return True
    return False


class Prettier(Formatter):
    name = "prettier"
    default_file_matcher = ["**/*.{t,j}s"]

    @property
    def binary_file_path(self) -> Path:
        return self.base_dir / "node_modules" / ".bin" / "prettier"

    @cached_property
    def config_path(self) -> str:
        """Path of the prettier config, discovered once instead of for every file."""
        result = run_command([str(self.binary_file_path), "--find-config-path", "."], cwd=self.base_dir)
        return result.stdout.strip()

    @cached_property
    def actions(self) -> dict[FormatterAction, FormatterActionConfig]:
        return {
            "check": FormatterActionConfig(
                command_flags=["--config", self.config_path, "--check"],
                callback=lambda file, code, stdout, stderr: code != 0,
            ),
            "format": FormatterActionConfig(
                command_flags=["--config", self.config_path, "--write"],
                callback=_format_failed,
            ),
        }
