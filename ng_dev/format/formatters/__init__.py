"""Formatters supported by ``ng-dev format``."""

from pathlib import Path
from typing import Any

from ng_dev.format.formatters.base import Formatter, FormatterAction
from ng_dev.format.formatters.buildifier import Buildifier
from ng_dev.format.formatters.clang_format import ClangFormat
from ng_dev.format.formatters.prettier import Prettier


def get_active_formatters(base_dir: Path, config: dict[str, Any]) -> list[Formatter]:
    """Gets all formatters enabled in the format configuration."""
    formatters: list[Formatter] = [Prettier(base_dir, config), Buildifier(base_dir, config), ClangFormat(base_dir, config)]
    return [formatter for formatter in formatters if formatter.is_enabled()]


__all__ = ["Buildifier", "ClangFormat", "Formatter", "FormatterAction", "Prettier", "get_active_formatters"]
