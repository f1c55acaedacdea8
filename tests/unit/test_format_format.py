"""Unit tests for formatting and checking the formatting of files."""

from pathlib import Path

import pytest
from pytest import MonkeyPatch

from ng_dev.format.format import check_files, format_files, run_formatters
from ng_dev.format.formatters import Buildifier, ClangFormat, Formatter, FormatterAction, Prettier, get_active_formatters
from ng_dev.format.formatters.base import FormatterActionConfig
from ng_dev.utils.child_process import SpawnResult


class FakeFormatter(Formatter):
    """Formatter recording the files it runs on and failing for a fixed set of files."""

    name = "fake"
    default_file_matcher = ["**/*.ts"]

    def __init__(
        self, failing: set[str] | None = None, config: dict | None = None, failing_action: FormatterAction | None = None
    ) -> None:
        super().__init__(Path("/repo"), config if config is not None else {"fake": True})
        self.failing = failing or set()
        self.failing_action = failing_action
        self.runs: list[tuple[FormatterAction, str]] = []

    @property
    def binary_file_path(self) -> Path:
        return Path("/repo/node_modules/.bin/fake")

    @property
    def actions(self) -> dict[FormatterAction, FormatterActionConfig]:
        callback = lambda file, code, stdout, stderr: False  # noqa: E731
        return {"check": FormatterActionConfig([], callback), "format": FormatterActionConfig([], callback)}

    def run_on_file(self, action: FormatterAction, file: str) -> bool:
        self.runs.append((action, file))
        return file in self.failing and self.failing_action in (None, action)


def test_run_formatters_without_matches() -> None:
    """Test that None is returned when no formatter matches any file."""
    formatter = FakeFormatter()
    assert run_formatters([formatter], ["README.md"], "check") is None
    assert formatter.runs == []


def test_run_formatters_collects_failures() -> None:
    """Test that only matching files are run and failures are reported once."""
    first = FakeFormatter(failing={"b.ts"})
    second = FakeFormatter(failing={"b.ts"})
    failures = run_formatters([first, second], ["a.ts", "b.ts", "README.md"], "check")
    assert failures == ["b.ts"]
    assert first.runs == [("check", "a.ts"), ("check", "b.ts")]


def test_format_files_exit_codes() -> None:
    """Test the exit code of formatting with and without failures."""
    assert format_files([FakeFormatter()], ["a.ts"]) == 0
    assert format_files([FakeFormatter(failing={"a.ts"})], ["a.ts"]) == 1
    assert format_files([FakeFormatter()], ["README.md"]) == 0


def test_check_files_all_formatted() -> None:
    """Test that a clean check succeeds."""
    assert check_files([FakeFormatter()], ["a.ts"]) == 0


def test_check_files_in_ci_does_not_prompt(monkeypatch: MonkeyPatch) -> None:
    """Test that failing checks in CI fail without prompting."""

    def fail_prompt(message: str) -> bool:
        raise AssertionError("prompted in CI")

    monkeypatch.setattr("ng_dev.format.format.prompt_confirm", fail_prompt)
    monkeypatch.setattr("ng_dev.format.format.is_interactive", lambda: True)
    assert check_files([FakeFormatter(failing={"a.ts"})], ["a.ts"], is_ci=True) == 1


@pytest.mark.parametrize("accept,expected", [(True, 0), (False, 1)])
def test_check_files_offers_to_format(monkeypatch: MonkeyPatch, accept: bool, expected: int) -> None:
    """Test that failing files are formatted when the operator accepts the prompt."""
    monkeypatch.setattr("ng_dev.format.format.prompt_confirm", lambda message: accept)
    monkeypatch.setattr("ng_dev.format.format.is_interactive", lambda: True)
    formatter = FakeFormatter(failing={"a.ts"}, failing_action="check")
    assert check_files([formatter], ["a.ts", "b.ts"]) == expected
    assert (("format", "a.ts") in formatter.runs) is accept
    assert ("format", "b.ts") not in formatter.runs


def test_matchers_from_config() -> None:
    """Test that configured matchers replace the default matchers."""
    formatter = FakeFormatter(config={"fake": {"matchers": ["src/**/*.js"]}})
    assert formatter.matches("src/app/main.js") is True
    assert formatter.matches("src/app/main.ts") is False


def test_get_active_formatters(tmp_path: Path) -> None:
    """Test that only enabled formatters are active."""
    active = get_active_formatters(tmp_path, {"prettier": True, "buildifier": False})
    assert [type(formatter) for formatter in active] == [Prettier]
    assert Buildifier(tmp_path, {}).matches("packages/core/BUILD.bazel") is True


def test_buildifier_check_reads_json_output(monkeypatch: MonkeyPatch, tmp_path: Path) -> None:
    """Test that buildifier check failures are read from its JSON output."""
    formatter = Buildifier(tmp_path, {"buildifier": True})
    outputs = iter(['{"success": true}', '{"success": false}', "not json"])
    monkeypatch.setattr(
        "ng_dev.format.formatters.base.run_command",
        lambda command, cwd=None, check=True: SpawnResult(0, next(outputs), ""),
    )
    assert formatter.run_on_file("check", "BUILD.bazel") is False
    assert formatter.run_on_file("check", "BUILD.bazel") is True
    assert formatter.run_on_file("check", "BUILD.bazel") is True


def test_clang_format_enabled_from_config(tmp_path: Path) -> None:
    """Test that clang-format is active when enabled and matches TypeScript and JavaScript files."""
    active = get_active_formatters(tmp_path, {"clang-format": True})
    assert [type(formatter) for formatter in active] == [ClangFormat]
    assert active[0].matches("packages/core/src/render.ts") is True
    assert active[0].matches("packages/core/BUILD.bazel") is False


@pytest.mark.parametrize(
    "action,status,flags,failed",
    [
        ("check", 0, ["--Werror", "-n", "-style=file"], False),
        ("check", 1, ["--Werror", "-n", "-style=file"], True),
        ("format", 0, ["-i", "-style=file"], False),
        ("format", 2, ["-i", "-style=file"], True),
    ],
)
def test_clang_format_run_on_file(
    monkeypatch: MonkeyPatch, tmp_path: Path, action: FormatterAction, status: int, flags: list[str], failed: bool
) -> None:
    """Test the clang-format commands and how their exit status is read."""
    commands: list[list[str]] = []

    def run(command: list[str], cwd: Path | None = None, check: bool = True) -> SpawnResult:
        commands.append(command)
        return SpawnResult(status, "", "error output")

    monkeypatch.setattr("ng_dev.format.formatters.base.run_command", run)
    formatter = ClangFormat(tmp_path, {"clang-format": True})
    assert formatter.run_on_file(action, "src/main.ts") is failed
    assert commands == [[str(tmp_path / "node_modules" / ".bin" / "clang-format"), *flags, "src/main.ts"]]
