"""Explicit context object passed to every ng-dev command handler.

The context lazily loads the repository configuration and creates the git, GitHub and
NPM registry clients on first use, so commands only pay for what they need. Tests
replace the context created by the CLI through ``set_context_for_testing``.
"""

import functools
from pathlib import Path
from typing import Any, Callable, TypeVar, cast

import structlog
import typer

from ng_dev.configuration.env import Settings, get_settings
from ng_dev.configuration.exceptions import ConfigValidationError
from ng_dev.configuration.loader import (
    assert_valid_github_config,
    print_config_validation_error,
    read_config_file,
    read_user_config_file,
)
from ng_dev.configuration.models import GithubConfig, NgDevConfig, NgDevUserConfig
from ng_dev.github.abc import GitHubClientBase
from ng_dev.github.adapter import GitHubKitAdapter
from ng_dev.github.client import GithubTokenMissingError
from ng_dev.github.exceptions import GithubApiRequestError
from ng_dev.npm.registry import HttpxNpmRegistryClient, NpmRegistryClientBase
from ng_dev.utils.console import error
from ng_dev.utils.constants import GITHUB_TOKEN_GENERATE_URL
from ng_dev.utils.git_client import GitClient, GitCommandError, get_repo_base_dir

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class NgDevContext:
    """Configuration and service clients shared by the commands of one invocation."""

    def __init__(
        self,
        base_dir: Path,
        settings: Settings | None = None,
        config: NgDevConfig | None = None,
        user_config: NgDevUserConfig | None = None,
        git_client: GitClient | None = None,
        github: GitHubClientBase | None = None,
        npm_registry: NpmRegistryClientBase | None = None,
    ) -> None:
        """Initialize the context for the repository at base_dir."""
        self.base_dir = base_dir
        self.settings = settings if settings is not None else get_settings()
        self._config = config
        self._user_config = user_config
        self._git_client = git_client
        self._github = github
        self._npm_registry = npm_registry

    @property
    def config(self) -> NgDevConfig:
        """The project configuration, read on first access."""
        if self._config is None:
            self._config = read_config_file(self.base_dir)
        return self._config

    @property
    def user_config(self) -> NgDevUserConfig:
        """The user configuration, read on first access."""
        if self._user_config is None:
            self._user_config = read_user_config_file(self.base_dir)
        return self._user_config

    @property
    def github_config(self) -> GithubConfig:
        """The validated upstream repository configuration."""
        return assert_valid_github_config(self.config)

    @property
    def is_ci(self) -> bool:
        """Whether ng-dev runs in a CI environment."""
        return self.settings.CI

    @property
    def git_client(self) -> GitClient:
        """The git client for the repository, authenticated when a token is available."""
        if self._git_client is None:
            self._git_client = GitClient(self.base_dir, self.github_config, self.settings.GITHUB_TOKEN)
        return self._git_client

    @property
    def github(self) -> GitHubClientBase:
        """The GitHub API client for the upstream repository."""
        if self._github is None:
            self._github = GitHubKitAdapter.create(self.github_config, self.settings.GITHUB_TOKEN, self.settings.GITHUB_API_URL)
        return self._github

    @property
    def npm_registry(self) -> NpmRegistryClientBase:
        """The NPM registry client."""
        if self._npm_registry is None:
            self._npm_registry = HttpxNpmRegistryClient(self.settings.NPM_REGISTRY_URL)
        return self._npm_registry


_context_for_testing: NgDevContext | None = None


def set_context_for_testing(context: NgDevContext | None) -> None:
    """Overrides the context created for CLI invocations. Pass None to reset."""
    global _context_for_testing
    _context_for_testing = context


def create_context(github_token: str | None = None) -> NgDevContext:
    """Creates the context for a CLI invocation in the current repository."""
    if _context_for_testing is not None:
        return _context_for_testing
    settings = get_settings()
    if github_token:
        settings.GITHUB_TOKEN = github_token
    base_dir = get_repo_base_dir()
    logger.debug("Created ng-dev context", base_dir=str(base_dir))
    return NgDevContext(base_dir, settings)


def get_cli_context(ctx: typer.Context) -> NgDevContext:
    """Returns the context of the current CLI invocation, creating it on first use."""
    ctx.ensure_object(dict)
    if "context" not in ctx.obj:
        ctx.obj["context"] = create_context(ctx.obj.get("github_token"))
    context: NgDevContext = ctx.obj["context"]
    return context


def exit_on_cli_error(func: F) -> F:
    """Decorator printing expected failures of a CLI command on one line and exiting with status 1.

    Covers invalid configuration, a missing GitHub token, failed GitHub API requests and
    failed git commands. Anything else propagates with its traceback.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except ConfigValidationError as exc:
            print_config_validation_error(exc)
            raise typer.Exit(1) from exc
        except GithubTokenMissingError as exc:
            error(str(exc))
            raise typer.Exit(1) from exc
        except GithubApiRequestError as exc:
            logger.error("GitHub API request failed", status_code=exc.status_code, url=exc.url)
            error(str(exc))
            if exc.status_code == 401:
                error(f"Please ensure that your provided token is valid: {GITHUB_TOKEN_GENERATE_URL}")
            raise typer.Exit(1) from exc
        except GitCommandError as exc:
            logger.error("Git command failed", args=exc.args_list, status=exc.status)
            error(str(exc))
            if exc.stderr:
                error(exc.stderr.strip())
            raise typer.Exit(1) from exc

    return cast(F, wrapper)
