"""Unit tests for the ng-dev command line interface."""

import json
from pathlib import Path

import pytest
import typer
from pytest import MonkeyPatch
from typer.testing import CliRunner

from ng_dev.cli import typer_app
from ng_dev.configuration.context import NgDevContext, exit_on_cli_error, set_context_for_testing
from ng_dev.configuration.models import NgDevConfig, ReleaseConfig
from ng_dev.github.client import GithubTokenMissingError
from ng_dev.github.exceptions import GithubApiRequestError
from ng_dev.ngbot.cli import ngbot_app
from ng_dev.pullapprove.cli import pullapprove_app
from ng_dev.release.build import BuiltPackage
from ng_dev.release.cli import release_app
from ng_dev.utils.git_client import GitCommandError

runner = CliRunner()

RELEASE_CONFIG = NgDevConfig(release=ReleaseConfig(npm_packages=["@angular/core", "@angular/common"], build_command=["yarn", "build"]))


def test_unknown_command_fails() -> None:
    """Test that unknown commands exit with a non-zero status."""
    result = runner.invoke(typer_app, ["not-a-command"])
    assert result.exit_code != 0


def test_ngbot_verify(tmp_path: Path) -> None:
    """Test the exit status of the NgBot verification command."""
    set_context_for_testing(NgDevContext(tmp_path, config=NgDevConfig()))
    assert runner.invoke(ngbot_app, []).exit_code == 1
    (tmp_path / ".github").mkdir()
    (tmp_path / ".github" / "angular-robot.yml").write_text("merge: {}\n")
    assert runner.invoke(ngbot_app, []).exit_code == 0


def test_pullapprove_verify_without_config(tmp_path: Path) -> None:
    """Test that verifying fails when the repository has no PullApprove config."""
    set_context_for_testing(NgDevContext(tmp_path, config=NgDevConfig()))
    assert runner.invoke(pullapprove_app, []).exit_code == 1


def test_release_build_prints_json(monkeypatch: MonkeyPatch, tmp_path: Path) -> None:
    """Test that built packages are printed as JSON."""
    set_context_for_testing(NgDevContext(tmp_path, config=RELEASE_CONFIG))
    built = [BuiltPackage("@angular/core", tmp_path / "core"), BuiltPackage("@angular/common", tmp_path / "common")]
    monkeypatch.setattr("ng_dev.release.cli.build_release_output", lambda command, base_dir, stamp: built)
    result = runner.invoke(release_app, ["build", "--json"])
    assert result.exit_code == 0
    assert json.loads(result.stdout) == [
        {"name": "@angular/core", "outputPath": str(tmp_path / "core")},
        {"name": "@angular/common", "outputPath": str(tmp_path / "common")},
    ]


@pytest.mark.parametrize(
    "built",
    [
        None,
        [],
        [BuiltPackage("@angular/core", Path("dist/core"))],
    ],
)
def test_release_build_failures(monkeypatch: MonkeyPatch, tmp_path: Path, built: list[BuiltPackage] | None) -> None:
    """Test that failed builds, empty output and missing packages exit with status 1."""
    set_context_for_testing(NgDevContext(tmp_path, config=RELEASE_CONFIG))
    monkeypatch.setattr("ng_dev.release.cli.build_release_output", lambda command, base_dir, stamp: built)
    assert runner.invoke(release_app, ["build"]).exit_code == 1


def test_release_build_without_release_config(tmp_path: Path) -> None:
    """Test that a missing release configuration exits with status 1."""
    set_context_for_testing(NgDevContext(tmp_path, config=NgDevConfig()))
    assert runner.invoke(release_app, ["build"]).exit_code == 1


def failing_app(exc: Exception) -> typer.Typer:
    app = typer.Typer()

    @app.command()
    @exit_on_cli_error
    def fail() -> None:
        raise exc

    return app


@pytest.mark.parametrize(
    "exc,expected",
    [
        (GithubTokenMissingError("No GitHub token configured."), "No GitHub token configured."),
        (GithubApiRequestError(500, "Server Error"), "GitHub API request failed with status 500: Server Error"),
        (GitCommandError(["push", "origin"], 128, "fatal: unable to access"), "fatal: unable to access"),
    ],
)
def test_command_errors_exit_with_message(exc: Exception, expected: str) -> None:
    """Test that expected command failures print a message and exit with status 1 instead of a traceback."""
    result = runner.invoke(failing_app(exc), [])
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert expected in result.output


def test_unauthorized_api_request_points_to_token_settings() -> None:
    """Test that a rejected token prints where a new token can be generated."""
    result = runner.invoke(failing_app(GithubApiRequestError(401, "Bad credentials")), [])
    assert result.exit_code == 1
    assert "https://github.com/settings/tokens/new" in result.output


def test_unexpected_errors_propagate() -> None:
    """Test that unexpected exceptions are not turned into a clean exit."""
    result = runner.invoke(failing_app(RuntimeError("boom")), [])
    assert isinstance(result.exception, RuntimeError)
