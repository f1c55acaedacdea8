"""Unit tests for building release output and linking it into other projects."""

import json
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from pytest import MonkeyPatch

from ng_dev.misc.build_and_link import build_and_link
from ng_dev.release.build import BuiltPackage, analyze_built_packages, build_release_output, get_missing_packages
from ng_dev.utils.child_process import CommandFailedError


def print_command(output: str) -> list[str]:
    return [sys.executable, "-c", f"print({output!r})"]


def test_build_release_output(tmp_path: Path) -> None:
    """Test that packages printed by the build command are resolved relative to the project."""
    output = json.dumps([{"name": "@angular/core", "outputPath": "dist/core"}])
    packages = build_release_output(print_command(output), tmp_path)
    assert packages == [BuiltPackage("@angular/core", (tmp_path / "dist" / "core").resolve())]


def test_build_release_output_stamping(tmp_path: Path) -> None:
    """Test that stamping is requested through the environment of the build command."""
    command = [sys.executable, "-c", "import json, os; print(json.dumps([{'name': os.environ['NG_DEV_STAMP_FOR_RELEASE'], 'outputPath': 'x'}]))"]
    packages = build_release_output(command, tmp_path, stamp_for_release=True)
    assert packages is not None
    assert packages[0].name == "true"


def test_build_release_output_failures(tmp_path: Path) -> None:
    """Test that failing commands and invalid output return None."""
    assert build_release_output([sys.executable, "-c", "raise SystemExit(3)"], tmp_path) is None
    assert build_release_output(print_command("not json"), tmp_path) is None


@pytest.mark.parametrize(
    "output",
    [
        {"name": "@angular/core", "outputPath": "dist/core"},
        [{"name": "@angular/core"}],
        [{"outputPath": "dist/core"}],
        [{"name": 1, "outputPath": "dist/core"}],
        ["@angular/core"],
    ],
)
def test_build_release_output_unexpected_shape(tmp_path: Path, output: object) -> None:
    """Test that valid JSON not describing a list of packages returns None."""
    assert build_release_output(print_command(json.dumps(output)), tmp_path) is None


def test_get_missing_packages() -> None:
    """Test that configured packages without build output are reported."""
    built = [BuiltPackage("@angular/core", Path("dist/core"))]
    assert get_missing_packages(["@angular/core", "@angular/common"], built) == ["@angular/common"]


def test_analyze_built_packages(tmp_path: Path) -> None:
    """Test that built packages are hashed and their package.json is read."""
    output = tmp_path / "core"
    output.mkdir()
    (output / "package.json").write_text('{"name": "@angular/core", "version": "10.1.0"}')
    (output / "index.js").write_text("export {};")
    first = analyze_built_packages([BuiltPackage("@angular/core", output)])[0]
    assert first.npm_info["version"] == "10.1.0"
    (output / "index.js").write_text("export const a = 1;")
    second = analyze_built_packages([BuiltPackage("@angular/core", output)])[0]
    assert first.content_hash != second.content_hash


def test_build_and_link_missing_project(tmp_path: Path) -> None:
    """Test that a missing project root fails before building."""
    assert build_and_link(["false"], tmp_path, tmp_path / "missing") == 1


def test_build_and_link(monkeypatch: MonkeyPatch, tmp_path: Path) -> None:
    """Test that every built package is registered and linked into the project."""
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.setattr(
        "ng_dev.misc.build_and_link.build_release_output",
        lambda command, base_dir: [BuiltPackage("@angular/core", tmp_path / "dist" / "core")],
    )
    run_command = MagicMock()
    monkeypatch.setattr("ng_dev.misc.build_and_link.run_command", run_command)
    assert build_and_link(["yarn", "build"], tmp_path, project) == 0
    run_command.assert_any_call(["yarn", "link", "--cwd", str(tmp_path / "dist" / "core")])
    run_command.assert_any_call(["yarn", "link", "--cwd", str(project), "@angular/core"])


def test_build_and_link_failure(monkeypatch: MonkeyPatch, tmp_path: Path) -> None:
    """Test that a failing yarn link exits with status 1."""
    monkeypatch.setattr(
        "ng_dev.misc.build_and_link.build_release_output",
        lambda command, base_dir: [BuiltPackage("@angular/core", tmp_path)],
    )
    monkeypatch.setattr(
        "ng_dev.misc.build_and_link.run_command",
        MagicMock(side_effect=CommandFailedError(["yarn", "link"], 1, "", "error")),
    )
    assert build_and_link(["yarn", "build"], tmp_path, tmp_path) == 1
