"""Loads the ng-dev project and user configuration files and validates their sections."""

from pathlib import Path
from typing import Any

import structlog
import typer
from pydantic import ValidationError
from ruamel.yaml.error import YAMLError

from ng_dev.configuration.exceptions import ConfigFileNotFoundError, ConfigValidationError
from ng_dev.configuration.models import (
    CaretakerConfig,
    CommitMessageConfig,
    GithubConfig,
    NgDevConfig,
    NgDevUserConfig,
    PullRequestConfig,
    ReleaseConfig,
)
from ng_dev.utils.yaml import load_yaml_file

logger = structlog.get_logger(__name__)

CONFIG_FILE_PATH = Path(".ng-dev") / "config.yaml"
"""Location of the project configuration file, relative to the repository root."""

USER_CONFIG_FILE_PATH = Path(".ng-dev.user.yaml")
"""Location of the optional, untracked user configuration file."""


def _format_validation_errors(exc: ValidationError) -> list[str]:
    return [f'"{".".join(str(part) for part in error["loc"])}": {error["msg"]}' for error in exc.errors()]


def _read_yaml_mapping(path: Path) -> dict[str, Any]:
    try:
        content = load_yaml_file(path)
    except YAMLError as exc:
        raise ConfigValidationError(f"Unable to parse configuration file: {path}", [str(exc)]) from exc
    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigValidationError(f"Configuration file must contain a mapping: {path}")
    return content


def read_config_file(base_dir: Path) -> NgDevConfig:
    """Reads and parses the project configuration file of the repository at base_dir."""
    path = base_dir / CONFIG_FILE_PATH
    if not path.is_file():
        raise ConfigFileNotFoundError(f"No configuration file found at: {path}")
    logger.debug("Reading configuration file", path=str(path))
    try:
        return NgDevConfig.model_validate(_read_yaml_mapping(path))
    except ValidationError as exc:
        raise ConfigValidationError("Invalid configuration file.", _format_validation_errors(exc)) from exc


def read_user_config_file(base_dir: Path) -> NgDevUserConfig:
    """Reads the user configuration file, returning defaults when it does not exist."""
    path = base_dir / USER_CONFIG_FILE_PATH
    if not path.is_file():
        logger.debug("No user configuration file found", path=str(path))
        return NgDevUserConfig()
    try:
        return NgDevUserConfig.model_validate(_read_yaml_mapping(path))
    except ValidationError as exc:
        raise ConfigValidationError("Invalid user configuration file.", _format_validation_errors(exc)) from exc


def assert_valid_github_config(config: NgDevConfig) -> GithubConfig:
    """Asserts that the GitHub repository is configured, returning its configuration."""
    errors: list[str] = []
    if config.github is None:
        errors.append('Github repository not configured. Set the "github" option.')
    else:
        if not config.github.name:
            errors.append('"github.name" is not defined')
        if not config.github.owner:
            errors.append('"github.owner" is not defined')
    if errors:
        raise ConfigValidationError("Invalid `github` configuration", errors)
    assert config.github is not None
    return config.github


def assert_valid_caretaker_config(config: NgDevConfig) -> CaretakerConfig:
    """Asserts that the caretaker section is configured."""
    if config.caretaker is None:
        raise ConfigValidationError('No configuration defined for "caretaker"')
    return config.caretaker


def assert_valid_commit_message_config(config: NgDevConfig) -> CommitMessageConfig:
    """Asserts that the commit message section is configured."""
    if config.commit_message is None:
        raise ConfigValidationError('No configuration defined for "commit_message"')
    return config.commit_message


def assert_valid_format_config(config: NgDevConfig) -> dict[str, Any]:
    """Asserts that every formatter is either a boolean or a mapping with matchers."""
    if config.format is None:
        raise ConfigValidationError('No configuration defined for "format"')
    errors: list[str] = []
    for key, value in config.format.items():
        if isinstance(value, bool):
            continue
        if isinstance(value, dict):
            if "matchers" not in value:
                errors.append(f'Missing "format.{key}.matchers" value')
            continue
        errors.append(f'"format.{key}" is not a boolean or Formatter object')
    if errors:
        raise ConfigValidationError("Invalid `format` configuration", errors)
    return config.format


def assert_valid_pull_request_config(config: NgDevConfig) -> PullRequestConfig:
    """Asserts that the pull request section is configured."""
    if config.pull_request is None:
        raise ConfigValidationError('No configuration defined for "pull_request"')
    return config.pull_request


def assert_valid_release_config(config: NgDevConfig) -> ReleaseConfig:
    """Asserts that the release section is configured with packages and a build command."""
    if config.release is None:
        raise ConfigValidationError('No configuration defined for "release"')
    errors: list[str] = []
    if not config.release.npm_packages:
        errors.append('No "npm_packages" configured for releasing.')
    if not config.release.build_command:
        errors.append('No "build_command" configured for building the release output.')
    if errors:
        raise ConfigValidationError("Invalid `release` configuration", errors)
    return config.release


def print_config_validation_error(exc: ConfigValidationError) -> None:
    """Prints a configuration error and the individual errors it aggregates."""
    if not exc.errors:
        typer.secho(exc.message, fg=typer.colors.RED, err=True)
        return
    typer.secho("Errors discovered while loading configuration file:", fg=typer.colors.RED, err=True)
    for error in exc.errors:
        typer.secho(f"  - {error}", fg=typer.colors.RED, err=True)
