"""Base class of the formatters run by ``ng-dev format``."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Literal

import structlog

from ng_dev.utils.child_process import run_command
from ng_dev.utils.glob import matches_glob

logger = structlog.get_logger(__name__)

FormatterAction = Literal["check", "format"]


@dataclass(frozen=True)
class FormatterActionConfig:
    """Command line flags of a formatter action and the callback deciding whether it failed.

    The callback receives the file, the exit status, stdout and stderr of the formatter.
    """

    command_flags: list[str]
    callback: Callable[[str, int, str, str], bool]


class Formatter(ABC):
    """A formatter run against the files matching its matchers."""

    name: str
    default_file_matcher: list[str]

    def __init__(self, base_dir: Path, config: dict[str, Any]) -> None:
        self.base_dir = base_dir
        self.config = config

    @property
    @abstractmethod
    def binary_file_path(self) -> Path:
        """The path of the formatter binary."""
        pass

    @property
    @abstractmethod
    def actions(self) -> dict[FormatterAction, FormatterActionConfig]:
        pass

    def command_for(self, action: FormatterAction) -> list[str]:
        """Gets the command executing the action, without the file to run on."""
        return [str(self.binary_file_path), *self.actions[action].command_flags]

    def callback_for(self, action: FormatterAction) -> Callable[[str, int, str, str], bool]:
        return self.actions[action].callback

    def is_enabled(self) -> bool:
        """Whether the formatter is enabled in the format configuration."""
        return bool(self.config.get(self.name))

    def get_file_matcher(self) -> list[str]:
        """Gets the configured matchers, falling back to the defaults of the formatter."""
        formatter_config = self.config.get(self.name)
        if isinstance(formatter_config, dict) and formatter_config.get("matchers"):
            return list(formatter_config["matchers"])
        return self.default_file_matcher

    def matches(self, file: str) -> bool:
        return any(matches_glob(file, pattern) for pattern in self.get_file_matcher())

    def run_on_file(self, action: FormatterAction, file: str) -> bool:
        """Runs the action on a single file and returns whether it failed."""
        result = run_command([*self.command_for(action), file], cwd=self.base_dir, check=False)
        logger.debug("Ran formatter", formatter=self.name, action=action, file=file, status=result.status)
        return self.callback_for(action)(file, result.status, result.stdout, result.stderr)
