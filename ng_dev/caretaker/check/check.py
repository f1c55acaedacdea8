"""Runs all caretaker check modules and prints their report."""

import structlog

from ng_dev.caretaker.check.base import BaseModule
from ng_dev.caretaker.check.ci import CiModule
from ng_dev.caretaker.check.g3 import G3Module
from ng_dev.caretaker.check.github import GithubQueriesModule
from ng_dev.caretaker.check.services import ServicesModule
from ng_dev.configuration.models import GithubConfig, NgDevConfig
from ng_dev.github.abc import GitHubClientBase
from ng_dev.utils.git_client import GitClient

logger = structlog.get_logger(__name__)

MODULES: list[type[BaseModule]] = [CiModule, G3Module, ServicesModule, GithubQueriesModule]


async def check_service_statuses(
    git: GitClient, github: GitHubClientBase, github_config: GithubConfig, config: NgDevConfig
) -> None:
    """Retrieves the data of every caretaker module, then prints each module's report."""
    modules = [module_type(git, github, github_config, config) for module_type in MODULES]
    for module in modules:
        logger.debug("Retrieving caretaker check data", module=type(module).__name__)
        await module.load()
    for module in modules:
        module.print_to_terminal()
