"""Wrappers around the ``npm`` command line client used while releasing."""

from pathlib import Path

import structlog

from ng_dev.utils.child_process import CommandFailedError, run_command, run_interactive

logger = structlog.get_logger(__name__)


class NpmLoginError(Exception):
    """Raised when logging into the NPM registry fails."""

    pass


def _with_registry(args: list[str], registry_url: str | None) -> list[str]:
    if registry_url is None:
        return args
    return [*args, "--registry", registry_url]


def run_npm_publish(package_path: Path, dist_tag: str, registry_url: str | None = None) -> None:
    """Runs ``npm publish`` within the package directory.

    Raises CommandFailedError with the process output if publishing failed.
    """
    run_command(["npm", *_with_registry(["publish", "--access", "public", "--tag", dist_tag], registry_url)], cwd=package_path)
    logger.info("Published package", package_path=str(package_path), dist_tag=dist_tag)


def set_npm_tag_for_package(package_name: str, dist_tag: str, version: str, registry_url: str | None = None) -> None:
    """Points the NPM dist tag of a package to the given version."""
    run_command(["npm", *_with_registry(["dist-tag", "add", f"{package_name}@{version}", dist_tag], registry_url)])


def npm_is_logged_in(registry_url: str | None = None) -> bool:
    """Whether the user is currently logged into the registry."""
    try:
        run_command(["npm", *_with_registry(["whoami"], registry_url)])
    except CommandFailedError:
        return False
    return True


def npm_login(registry_url: str | None = None) -> None:
    """Logs into the registry interactively."""
    status = run_interactive(["npm", *_with_registry(["login", "--no-browser"], registry_url)])
    if status != 0:
        raise NpmLoginError(f"Unable to log into NPM (exit status {status}).")


def npm_logout(registry_url: str | None = None) -> bool:
    """Logs out of the registry and returns whether the user is still logged in."""
    result = run_command(["npm", *_with_registry(["logout"], registry_url)], check=False)
    if result.status != 0:
        logger.warning("npm logout failed", stderr=result.stderr.strip())
    return npm_is_logged_in(registry_url)
