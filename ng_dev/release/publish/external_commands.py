"""External commands invoked by release actions in the checked out project."""

import json
import sys
from pathlib import Path

import structlog

from ng_dev.release.build import BuiltPackage
from ng_dev.release.publish.actions_error import FatalReleaseActionError
from ng_dev.release.versioning import SemVer
from ng_dev.utils.child_process import CommandFailedError, run_command
from ng_dev.utils.console import error, green, info, red

logger = structlog.get_logger(__name__)


def _ng_dev_command(*args: str) -> list[str]:
    # The command runs with the current interpreter so the installed ng-dev version is used.
    return [sys.executable, "-m", "ng_dev.cli", *args]


def invoke_set_npm_dist_command(project_dir: Path, npm_dist_tag: str, version: SemVer) -> None:
    """Sets the NPM dist tag for all packages configured in the checked out branch.

    Raises:
        FatalReleaseActionError: If the dist tag could not be set.
    """
    try:
        run_command(_ng_dev_command("release", "set-dist-tag", npm_dist_tag, version.format()), cwd=project_dir)
    except CommandFailedError as exc:
        error(exc.stderr.strip())
        error(red(f'  ✘   An error occurred while setting the NPM dist tag for "{npm_dist_tag}".'))
        raise FatalReleaseActionError() from exc
    info(green(f'  ✓   Set "{npm_dist_tag}" NPM dist tag for all packages to v{version}.'))


def invoke_release_build_command(project_dir: Path) -> list[BuiltPackage]:
    """Builds the release output of the checked out branch.

    Only packages configured in the checked out branch are built, which can differ from
    the packages configured in the next branch.

    Raises:
        FatalReleaseActionError: If the build failed.
    """
    try:
        result = run_command(_ng_dev_command("release", "build", "--json"), cwd=project_dir)
        raw_packages = json.loads(result.stdout.strip())
    except (CommandFailedError, json.JSONDecodeError) as exc:
        error(str(exc))
        error(red("  ✘   An error occurred while building the release packages."))
        raise FatalReleaseActionError() from exc
    info(green("  ✓   Built release output for all packages."))
    return [BuiltPackage(name=raw["name"], output_path=Path(raw["outputPath"])) for raw in raw_packages]


def invoke_yarn_install_command(project_dir: Path) -> None:
    """Installs the project dependencies of the checked out branch.

    Raises:
        FatalReleaseActionError: If the installation failed.
    """
    try:
        run_command(["yarn", "install", "--frozen-lockfile", "--non-interactive"], cwd=project_dir)
    except CommandFailedError as exc:
        error(exc.stderr.strip())
        error(red("  ✘   An error occurred while installing dependencies."))
        raise FatalReleaseActionError() from exc
    info(green("  ✓   Installed project dependencies."))
