"""Unit tests for loading and validating the ng-dev configuration."""

from pathlib import Path

import pytest

from ng_dev.configuration.exceptions import ConfigFileNotFoundError, ConfigValidationError
from ng_dev.configuration.loader import (
    assert_valid_format_config,
    assert_valid_github_config,
    assert_valid_release_config,
    read_config_file,
    read_user_config_file,
)
from ng_dev.configuration.models import GithubConfig, MergeMethod, NgDevConfig, ReleaseConfig

CONFIG_YAML = """
github:
  owner: angular
  name: angular
  main_branch_name: main
commit_message:
  max_line_length: 100
  scopes: [core, router]
pull_request:
  merge_ready_label: "action: merge"
  github_api_merge:
    default: rebase
    labels:
      - pattern: "merge: squash commits"
        method: squash
release:
  npm_packages: ["@angular/core"]
  build_command: [yarn, build]
format:
  prettier: true
"""


def write_config(base_dir: Path, content: str) -> None:
    config_dir = base_dir / ".ng-dev"
    config_dir.mkdir()
    (config_dir / "config.yaml").write_text(content)


def test_read_config_file(tmp_path: Path) -> None:
    """Test that all sections of the configuration file are parsed."""
    write_config(tmp_path, CONFIG_YAML)
    config = read_config_file(tmp_path)
    assert config.github is not None
    assert config.github.owner == "angular"
    assert config.commit_message is not None
    assert config.commit_message.max_line_length == 100
    assert config.commit_message.scopes == ["core", "router"]
    assert config.pull_request is not None
    assert config.pull_request.github_api_merge is not None
    assert config.pull_request.github_api_merge.default == MergeMethod.REBASE
    assert config.pull_request.github_api_merge.labels[0].method == MergeMethod.SQUASH
    assert config.release is not None
    assert config.release.npm_packages == ["@angular/core"]
    assert config.format == {"prettier": True}


def test_read_config_file_missing(tmp_path: Path) -> None:
    """Test that a missing configuration file raises ConfigFileNotFoundError."""
    with pytest.raises(ConfigFileNotFoundError):
        read_config_file(tmp_path)


def test_read_config_file_malformed_yaml(tmp_path: Path) -> None:
    """Test that malformed YAML raises ConfigValidationError."""
    write_config(tmp_path, "github: [owner: angular")
    with pytest.raises(ConfigValidationError, match="Unable to parse configuration file"):
        read_config_file(tmp_path)


def test_read_config_file_invalid_values(tmp_path: Path) -> None:
    """Test that values of the wrong type are reported per field."""
    write_config(tmp_path, "commit_message:\n  max_line_length: lots\n")
    with pytest.raises(ConfigValidationError) as exc_info:
        read_config_file(tmp_path)
    assert any("commit_message.max_line_length" in error for error in exc_info.value.errors)


def test_read_user_config_file(tmp_path: Path) -> None:
    """Test that the user configuration defaults when missing and is parsed when present."""
    assert read_user_config_file(tmp_path).commit_message.disable_wizard is False
    (tmp_path / ".ng-dev.user.yaml").write_text("commit_message:\n  disable_wizard: true\n")
    assert read_user_config_file(tmp_path).commit_message.disable_wizard is True


def test_assert_valid_github_config() -> None:
    """Test that the owner and name of the repository are required."""
    assert assert_valid_github_config(NgDevConfig(github=GithubConfig(owner="a", name="b"))).name == "b"
    with pytest.raises(ConfigValidationError) as exc_info:
        assert_valid_github_config(NgDevConfig(github=GithubConfig(owner="a")))
    assert exc_info.value.errors == ['"github.name" is not defined']
    with pytest.raises(ConfigValidationError):
        assert_valid_github_config(NgDevConfig())


def test_assert_valid_release_config() -> None:
    """Test that packages and a build command are required for releasing."""
    with pytest.raises(ConfigValidationError) as exc_info:
        assert_valid_release_config(NgDevConfig(release=ReleaseConfig()))
    assert len(exc_info.value.errors) == 2
    with pytest.raises(ConfigValidationError, match='No configuration defined for "release"'):
        assert_valid_release_config(NgDevConfig())


def test_assert_valid_format_config() -> None:
    """Test that formatters are booleans or mappings with matchers."""
    valid = {"prettier": True, "buildifier": {"matchers": ["**/*.bzl"]}}
    assert assert_valid_format_config(NgDevConfig(format=valid)) == valid

    with pytest.raises(ConfigValidationError) as exc_info:
        assert_valid_format_config(NgDevConfig(format={"prettier": {}, "buildifier": "yes"}))
    assert exc_info.value.errors == [
        'Missing "format.prettier.matchers" value',
        '"format.buildifier" is not a boolean or Formatter object',
    ]
    with pytest.raises(ConfigValidationError, match='No configuration defined for "format"'):
        assert_valid_format_config(NgDevConfig())
