"""Formats or checks the formatting of a set of files with all active formatters."""

import structlog

from ng_dev.format.formatters import Formatter, FormatterAction
from ng_dev.utils.console import error, info, is_interactive, prompt_confirm

logger = structlog.get_logger(__name__)


def run_formatters(formatters: list[Formatter], files: list[str], action: FormatterAction) -> list[str] | None:
    """Runs the action of every formatter on the files it matches.

    Returns the files for which the action failed, or None if no formatter matched any file.
    """
    failures: list[str] = []
    matched_any = False
    for formatter in formatters:
        matched = [file for file in files if formatter.matches(file)]
        logger.debug("Running formatter", formatter=formatter.name, action=action, files=len(matched))
        for file in matched:
            matched_any = True
            if formatter.run_on_file(action, file) and file not in failures:
                failures.append(file)
    return failures if matched_any else None


def format_files(formatters: list[Formatter], files: list[str]) -> int:
    """Formats the files in place and returns the exit code."""
    failures = run_formatters(formatters, files, "format")
    if failures is None:
        info("No files matched for formatting.")
        return 0
    # Any file which failed to format fails the whole run.
    if failures:
        error("Formatting failed, see errors above for more information.")
        return 1
    info("√  Formatting complete.")
    return 0


def check_files(formatters: list[Formatter], files: list[str], is_ci: bool = False) -> int:
    """Checks the formatting of the files, offering to format failing files outside of CI."""
    failures = run_formatters(formatters, files, "check")
    if failures is None:
        info("No files matched for formatting check.")
        return 0
    if not failures:
        info("√  All files correctly formatted.")
        return 0

    info("")
    info("The following files are out of format:")
    for file in failures:
        info(f"  - {file}")
    info("")

    if not is_ci and is_interactive() and prompt_confirm("Format the files now?"):
        return format_files(formatters, failures)
    info("")
    info("To format the failing file run the following command:")
    info(f"  ng-dev format files {' '.join(failures)}")
    return 1
