"""Builds the release output of the project with the configured build command."""

import hashlib
import json
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

logger = structlog.get_logger(__name__)


class _BuildOutputEntry(BaseModel):
    model_config = ConfigDict(strict=True)

    name: str
    output_path: str = Field(alias="outputPath")


_BUILD_OUTPUT_ADAPTER = TypeAdapter(list[_BuildOutputEntry])


@dataclass(frozen=True)
class BuiltPackage:
    """A package built by the release build command."""

    name: str
    output_path: Path


@dataclass(frozen=True)
class BuiltPackageWithInfo(BuiltPackage):
    """A built package together with a hash of its contents and its NPM package information."""

    content_hash: str
    npm_info: dict[str, Any]


def build_release_output(build_command: list[str], base_dir: Path, stamp_for_release: bool = False) -> list[BuiltPackage] | None:
    """Runs the build command and returns the packages it reports.

    The build command prints a JSON list of ``{"name", "outputPath"}`` objects to stdout.
    Its stderr is passed through to the terminal so progress stays visible, also when the
    result of ``release build --json`` is consumed from stdout. Returns None if the build
    failed or printed output of another shape.
    """
    env = {**os.environ, "NG_DEV_STAMP_FOR_RELEASE": "true"} if stamp_for_release else None
    logger.debug("Building release output", command=build_command)
    result = subprocess.run(build_command, cwd=base_dir, env=env, stdout=subprocess.PIPE, text=True)
    if result.returncode != 0:
        logger.error("Release build command failed", status=result.returncode)
        return None
    try:
        raw_packages = json.loads(result.stdout)
    except json.JSONDecodeError as exc:
        logger.error("Release build command printed invalid JSON", error=str(exc))
        return None
    try:
        entries = _BUILD_OUTPUT_ADAPTER.validate_python(raw_packages)
    except ValidationError as exc:
        logger.error("Release build command printed unexpected output", errors=exc.errors(include_url=False))
        return None
    return [BuiltPackage(name=entry.name, output_path=(base_dir / entry.output_path).resolve()) for entry in entries]


def compute_directory_hash(directory: Path) -> str:
    """Computes a SHA-256 hash over the relative paths and contents of all files in a directory."""
    digest = hashlib.sha256()
    for file_path in sorted(path for path in directory.rglob("*") if path.is_file()):
        digest.update(file_path.relative_to(directory).as_posix().encode())
        digest.update(file_path.read_bytes())
    return digest.hexdigest()


def analyze_built_packages(packages: list[BuiltPackage]) -> list[BuiltPackageWithInfo]:
    """Extends the built packages with their content hash and ``package.json`` contents."""
    analyzed: list[BuiltPackageWithInfo] = []
    for package in packages:
        package_json_path = package.output_path / "package.json"
        npm_info = json.loads(package_json_path.read_text()) if package_json_path.is_file() else {}
        analyzed.append(
            BuiltPackageWithInfo(
                name=package.name,
                output_path=package.output_path,
                content_hash=compute_directory_hash(package.output_path),
                npm_info=npm_info,
            )
        )
    return analyzed


def get_missing_packages(npm_packages: list[str], built_packages: list[BuiltPackage]) -> list[str]:
    """Gets the configured packages that are missing in the build output."""
    built_names = {package.name for package in built_packages}
    return [name for name in npm_packages if name not in built_names]
