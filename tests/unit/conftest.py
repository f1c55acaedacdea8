"""Fixtures for unit tests."""

from typing import Generator

import pytest
import structlog

from ng_dev.configuration.context import set_context_for_testing
from ng_dev.configuration.models import CommitMessageConfig, GithubConfig, PullRequestConfig


@pytest.fixture(autouse=True)
def configure_structlog_for_caplog() -> Generator[None, None, None]:
    """Configure structlog for use with caplog."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def reset_cli_context() -> Generator[None, None, None]:
    """Reset any context installed for CLI tests."""
    yield
    set_context_for_testing(None)


@pytest.fixture
def github_config() -> GithubConfig:
    """The upstream repository used throughout the tests."""
    return GithubConfig(owner="angular", name="dev-infra-test", main_branch_name="main")


@pytest.fixture
def commit_message_config() -> CommitMessageConfig:
    """Commit message rules with a small set of scopes."""
    return CommitMessageConfig(max_line_length=120, min_body_length=20, scopes=["core", "router", "dev-infra"])


@pytest.fixture
def pull_request_config() -> PullRequestConfig:
    """Pull request configuration with the default labels."""
    return PullRequestConfig()
