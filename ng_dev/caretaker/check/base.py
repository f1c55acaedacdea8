"""Base class of the caretaker check modules."""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from ng_dev.configuration.models import GithubConfig, NgDevConfig
from ng_dev.github.abc import GitHubClientBase
from ng_dev.utils.git_client import GitClient

T = TypeVar("T")


class BaseModule(ABC, Generic[T]):
    """A caretaker check module retrieving data and printing it to the terminal.

    Data is retrieved for all modules before any module prints, so the printed
    report is not interleaved with network latency.
    """

    def __init__(self, git: GitClient, github: GitHubClientBase, github_config: GithubConfig, config: NgDevConfig) -> None:
        self.git = git
        self.github = github
        self.github_config = github_config
        self.config = config
        self.data: T | None = None

    async def load(self) -> None:
        """Retrieves the data of the module."""
        self.data = await self.retrieve_data()

    @abstractmethod
    async def retrieve_data(self) -> T | None:
        """Retrieves the data shown by the module, or None if the module does not apply."""
        pass

    @abstractmethod
    def print_to_terminal(self) -> None:
        """Prints the retrieved data."""
        pass


def pad_labels(labels: list[str]) -> int:
    """Gets the width that aligns all labels in a column."""
    return max((len(label) for label in labels), default=0)


def indent(message: str, level: int = 1) -> str:
    return "  " * level + message
