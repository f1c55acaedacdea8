"""Commands for building, publishing and inspecting releases."""

import asyncio
import json
from enum import Enum
from pathlib import Path

import typer
from typer import Argument, Option
from typing_extensions import Annotated

from ng_dev.configuration.context import exit_on_cli_error, get_cli_context
from ng_dev.configuration.loader import assert_valid_release_config
from ng_dev.release.build import build_release_output, get_missing_packages
from ng_dev.release.notes.release_notes import NoSemverTagError, ReleaseNotes, get_latest_semver_tag
from ng_dev.release.publish.release_tool import CompletionState, ReleaseTool
from ng_dev.release.set_dist_tag import set_dist_tag_for_packages
from ng_dev.release.versioning import InvalidVersionError, ReleaseTrainsError, SemVer, fetch_active_release_trains
from ng_dev.release.versioning.print_active_trains import print_active_release_trains
from ng_dev.utils.console import error, green, info, red, yellow

release_app = typer.Typer(help="Release tooling for building, publishing and inspecting releases.")


class ReleaseNotesType(str, Enum):
    """Kinds of release notes the notes command renders."""

    CHANGELOG = "changelog"
    GITHUB_RELEASE = "github-release"


@release_app.command(name="build")
@exit_on_cli_error
def build_cli(
    ctx: typer.Context,
    json_output: Annotated[bool, Option("--json", help="Whether the built packages should be printed to stdout as JSON.")] = False,
    stamp_for_release: Annotated[bool, Option(help="Whether the built packages should be stamped for release.")] = False,
) -> None:
    """Build the release output for the current branch."""
    context = get_cli_context(ctx)
    config = assert_valid_release_config(context.config)
    built_packages = build_release_output(config.build_command, context.base_dir, stamp_for_release)

    if built_packages is None:
        error(red("  ✘   Could not build release output. Please check output above."))
        raise typer.Exit(1)
    # Building no packages at all is never correct.
    if not built_packages:
        error(red("  ✘   No release packages have been built. Please ensure that the"))
        error(red('      build script is configured correctly in ".ng-dev".'))
        raise typer.Exit(1)
    missing_packages = get_missing_packages(config.npm_packages, built_packages)
    if missing_packages:
        error(red("  ✘   Release output missing for the following packages:"))
        for package_name in missing_packages:
            error(red(f"      - {package_name}"))
        raise typer.Exit(1)

    if json_output:
        typer.echo(
            json.dumps([{"name": package.name, "outputPath": str(package.output_path)} for package in built_packages], indent=2)
        )
        return
    info(green("  ✓   Built release packages."))
    for package in built_packages:
        info(green(f"      - {package.name}"))


@release_app.command(name="info")
@exit_on_cli_error
def info_cli(ctx: typer.Context) -> None:
    """Print the active release trains to the console."""
    context = get_cli_context(ctx)
    config = assert_valid_release_config(context.config)

    async def print_info() -> None:
        active = await fetch_active_release_trains(context.github, context.github_config.main_branch_name)
        await print_active_release_trains(active, context.npm_registry, config.npm_packages[0])

    try:
        asyncio.run(print_info())
    except ReleaseTrainsError as exc:
        error(red(str(exc)))
        raise typer.Exit(1) from exc


@release_app.command(name="notes")
@exit_on_cli_error
def notes_cli(
    ctx: typer.Context,
    release_version: Annotated[str, Option(help="The version the release notes are created for.")] = "0.0.0",
    from_ref: Annotated[
        str | None, Option("--from", help="The git tag or ref to start the changelog entry from. Defaults to the latest semver tag.")
    ] = None,
    to_ref: Annotated[str, Option("--to", help="The git tag or ref to end the changelog entry with.")] = "HEAD",
    notes_type: Annotated[ReleaseNotesType, Option("--type", help="The type of release notes to create.")] = ReleaseNotesType.CHANGELOG,
    out_file: Annotated[Path | None, Option(help="File location to write the generated release notes to.")] = None,
    prepend_to_changelog: Annotated[bool, Option(help="Whether to prepend the entry to the changelog of the repository.")] = False,
) -> None:
    """Generate release notes for the commits in a range."""
    context = get_cli_context(ctx)
    config = assert_valid_release_config(context.config)
    try:
        version = SemVer.parse(release_version)
    except InvalidVersionError as exc:
        error(red(f"Invalid release version: {release_version}"))
        raise typer.Exit(1) from exc
    try:
        start_ref = from_ref or get_latest_semver_tag(context.git_client)
    except NoSemverTagError as exc:
        error(red(str(exc)))
        raise typer.Exit(1) from exc

    release_notes = ReleaseNotes.from_range(
        context.git_client, version, start_ref, to_ref, context.github_config, config.release_notes
    )
    if prepend_to_changelog:
        changelog_path = release_notes.prepend_entry_to_changelog(context.base_dir)
        info(f'Added release notes for "{version}" to {changelog_path}')
        return

    if notes_type == ReleaseNotesType.CHANGELOG:
        entry = release_notes.get_changelog_entry()
    else:
        entry = release_notes.get_github_release_entry()
    if out_file is not None:
        out_file.write_text(entry)
        info(f'Generated release notes for "{version}" written to {out_file}')
    else:
        typer.echo(entry, nl=False)


@release_app.command(name="set-dist-tag")
@exit_on_cli_error
def set_dist_tag_cli(
    ctx: typer.Context,
    tag_name: Annotated[str, Argument(help="Name of the NPM dist tag.")],
    target_version: Annotated[str, Argument(help="Version to which the dist tag should be set.")],
) -> None:
    """Set an NPM dist tag for all release packages."""
    context = get_cli_context(ctx)
    config = assert_valid_release_config(context.config)
    raise typer.Exit(set_dist_tag_for_packages(config.npm_packages, tag_name, target_version, config.publish_registry))


@release_app.command(name="publish")
@exit_on_cli_error
def publish_cli(ctx: typer.Context) -> None:
    """Publish new releases and configure version branches."""
    context = get_cli_context(ctx)
    config = assert_valid_release_config(context.config)
    tool = ReleaseTool(
        context.git_client, context.github, context.npm_registry, context.github_config, config, context.base_dir
    )
    result = asyncio.run(tool.run())
    if result == CompletionState.FATAL_ERROR:
        error(red("Release action has been aborted due to fatal errors. See above."))
        raise typer.Exit(2)
    if result == CompletionState.MANUALLY_ABORTED:
        info(yellow("Release action has been manually aborted."))
        raise typer.Exit(1)
    info(green("Release action has completed successfully."))
