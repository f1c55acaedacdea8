"""Builds the release output and links the packages into another project with yarn."""

from pathlib import Path

import structlog

from ng_dev.release.build import build_release_output
from ng_dev.utils.child_process import CommandFailedError, run_command
from ng_dev.utils.console import error, green, info, red

logger = structlog.get_logger(__name__)


def build_and_link(build_command: list[str], base_dir: Path, project_root: Path) -> int:
    """Builds the release packages, registers them with ``yarn link`` and links them into project_root.

    Returns the exit code of the command.
    """
    if not project_root.exists():
        error(red(f"  ✘   Could not find the 'projectRoot' provided: {project_root}"))
        return 1
    if not project_root.is_dir():
        error(red(f"  ✘   The 'projectRoot' must be a directory: {project_root}"))
        return 1

    release_outputs = build_release_output(build_command, base_dir)
    if release_outputs is None:
        error(red("  ✘   Could not build release output. Please check output above."))
        return 1
    info(green(" ✓  Built release output."))

    for package in release_outputs:
        try:
            run_command(["yarn", "link", "--cwd", str(package.output_path)])
            run_command(["yarn", "link", "--cwd", str(project_root), package.name])
        except CommandFailedError as exc:
            error(exc.stderr.strip())
            error(red(f'  ✘   Could not link "{package.name}" into the provided project.'))
            return 1
        logger.debug("Linked release package", package=package.name, project_root=str(project_root))

    info(green(" ✓  Linked release packages in provided project."))
    return 0
