"""Points an NPM dist tag of all release packages to a version."""

import structlog

from ng_dev.npm.publish import set_npm_tag_for_package
from ng_dev.release.versioning import SemVer
from ng_dev.utils.child_process import CommandFailedError
from ng_dev.utils.console import bold, error, green, info, red

logger = structlog.get_logger(__name__)


def set_dist_tag_for_packages(npm_packages: list[str], tag_name: str, raw_version: str, registry_url: str | None = None) -> int:
    """Sets the dist tag for every package, returning the exit code of the command."""
    version = SemVer.try_parse(raw_version)
    if version is None:
        error(red(f"Invalid version specified ({raw_version}). Unable to set NPM dist tag."))
        return 1

    logger.debug("Setting NPM dist tag for release packages", tag=tag_name, version=version.format())
    for package_name in npm_packages:
        try:
            set_npm_tag_for_package(package_name, tag_name, version.format(), registry_url)
        except CommandFailedError as exc:
            error(exc.stderr.strip())
            error(red(f'  ✘   An error occurred while setting the NPM dist tag for "{package_name}".'))
            return 1
        logger.debug("Set NPM dist tag", package=package_name, tag=tag_name)

    info(green("  ✓   Set NPM dist tag for all release packages."))
    info(green(f"      {bold(tag_name)} will now point to {bold(f'v{version}')}."))
    return 0
