"""Formatter running buildifier against Bazel files."""

import json
from functools import cached_property
from pathlib import Path

from ng_dev.format.formatters.base import Formatter, FormatterAction, FormatterActionConfig
from ng_dev.utils.console import error

BAZEL_WARNING_FLAG = (
    "--warnings=attr-cfg,attr-license,attr-non-empty,attr-output-default,"
    "attr-single-file,constant-glob,ctx-args,depset-iteration,depset-union,dict-concatenation,"
    "duplicated-name,filetype,git-repository,http-archive,integer-division,load,load-on-top,"
    "native-build,native-package,output-group,package-name,package-on-top,positional-args,"
    "redefined-variable,repository-name,same-origin-load,string-iteration,unused-variable"
)


def _check_failed(file: str, code: int, stdout: str, stderr: str) -> bool:
    if code != 0:
        return True
    try:
        return not json.loads(stdout).get("success", False)
    except json.JSONDecodeError:
        return True


def _format_failed(file: str, code: int, stdout: str, stderr: str) -> bool:
    if code != 0:
        error(f"Error running buildifier on: {file}")
        error(stderr)
        error("")
        return True
    return False


class Buildifier(Formatter):
    name = "buildifier"
    default_file_matcher = ["**/*.bzl", "**/BUILD.bazel", "**/WORKSPACE", "**/BUILD"]

    @property
    def binary_file_path(self) -> Path:
        return self.base_dir / "node_modules" / ".bin" / "buildifier"

    @cached_property
    def actions(self) -> dict[FormatterAction, FormatterActionConfig]:
        return {
            "check": FormatterActionConfig(
                command_flags=[BAZEL_WARNING_FLAG, "--lint=warn", "--mode=check", "--format=json"],
                callback=_check_failed,
            ),
            "format": FormatterActionConfig(
                command_flags=[BAZEL_WARNING_FLAG, "--lint=fix", "--mode=fix"],
                callback=_format_failed,
            ),
        }
