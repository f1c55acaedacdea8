"""Formatter running clang-format against TypeScript and JavaScript files."""

from pathlib import Path

from ng_dev.format.formatters.base import Formatter, FormatterAction, FormatterActionConfig
from ng_dev.utils.console import error


def _format_failed(file: str, code: int, stdout: str, stderr: str) -> bool:
    if code != 0:
        error(f"Error running clang-format on: {file}")
        error(stderr)
        error("")
        return True
    return False


class ClangFormat(Formatter):
    name = "clang-format"
    default_file_matcher = ["**/*.{t,j}s"]

    @property
    def binary_file_path(self) -> Path:
        return self.base_dir / "node_modules" / ".bin" / "clang-format"

    @property
    def actions(self) -> dict[FormatterAction, FormatterActionConfig]:
        return {
            "check": FormatterActionConfig(
                command_flags=["--Werror", "-n", "-style=file"],
                callback=lambda file, code, stdout, stderr: code != 0,
            ),
            "format": FormatterActionConfig(command_flags=["-i", "-style=file"], callback=_format_failed),
        }
