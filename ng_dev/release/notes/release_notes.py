"""Generates release notes from the commits between two git refs."""

from datetime import date
from pathlib import Path

import structlog
from packaging.version import InvalidVersion, Version

from ng_dev.commit_message.parse import Commit, get_commits_in_range
from ng_dev.configuration.models import GithubConfig, ReleaseNotesConfig
from ng_dev.release.notes.context import RenderContext
from ng_dev.release.versioning import SemVer
from ng_dev.utils.console import prompt_input
from ng_dev.utils.constants import CHANGELOG_FILE_PATH, CHANGELOG_SPLIT_MARKER
from ng_dev.utils.git_client import GitClient
from ng_dev.utils.templates import render_template_file

logger = structlog.get_logger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
CHANGELOG_TEMPLATE = TEMPLATES_DIR / "changelog.j2"
GITHUB_RELEASE_TEMPLATE = TEMPLATES_DIR / "github_release.j2"


class NoSemverTagError(Exception):
    """Raised when the repository has no stable semver tag to start release notes from."""

    pass


def get_latest_semver_tag(git: GitClient) -> str:
    """Gets the most recent stable version tag of the repository.

    Raises:
        NoSemverTagError: If no tag is a stable version.
    """
    stable_tags: list[tuple[Version, str]] = []
    for tag in git.list_tags():
        try:
            version = Version(tag)
        except InvalidVersion:
            continue
        if not version.is_prerelease and SemVer.try_parse(tag.removeprefix("v")) is not None:
            stable_tags.append((version, tag))
    if not stable_tags:
        raise NoSemverTagError("Unable to find a stable semver tag in the repository.")
    return max(stable_tags)[1]


class ReleaseNotes:
    """Release notes for a version, built from the commits in a range."""

    def __init__(
        self,
        version: SemVer,
        commits: list[Commit],
        github_config: GithubConfig,
        config: ReleaseNotesConfig,
        release_date: date | None = None,
    ) -> None:
        self.version = version
        self.commits = commits
        self.github_config = github_config
        self.config = config
        self.release_date = release_date
        self._title: str | None = None
        self._title_prompted = False

    @classmethod
    def from_range(
        cls,
        git: GitClient,
        version: SemVer,
        start_ref: str,
        end_ref: str,
        github_config: GithubConfig,
        config: ReleaseNotesConfig,
    ) -> "ReleaseNotes":
        """Creates the release notes for the commits between start_ref (exclusive) and end_ref."""
        commits = get_commits_in_range(git, start_ref, end_ref)
        logger.debug("Collected commits for release notes", start=start_ref, end=end_ref, count=len(commits))
        return cls(version, commits, github_config, config)

    def get_changelog_entry(self) -> str:
        """Renders the entry for the changelog file."""
        return render_template_file(CHANGELOG_TEMPLATE, **self.build_render_context().template_variables())

    def get_github_release_entry(self) -> str:
        """Renders the body of the GitHub release."""
        return render_template_file(GITHUB_RELEASE_TEMPLATE, **self.build_render_context().template_variables())

    def get_commit_count_in_release_notes(self) -> int:
        """Gets the number of commits shown in the release notes."""
        context = self.build_render_context()
        return len(context.filter_commits(context.include_in_release_notes()))

    def prepend_entry_to_changelog(self, base_dir: Path) -> Path:
        """Prepends the changelog entry to the changelog of the repository, creating it if needed."""
        changelog_path = base_dir / CHANGELOG_FILE_PATH
        existing = changelog_path.read_text() if changelog_path.is_file() else ""
        entry = self.get_changelog_entry().strip()
        content = f"{entry}\n\n{CHANGELOG_SPLIT_MARKER}\n\n{existing.lstrip()}" if existing else f"{entry}\n"
        changelog_path.write_text(content)
        logger.info("Prepended release notes to changelog", path=str(changelog_path), version=self.version.format())
        return changelog_path

    def prompt_for_release_title(self) -> str | None:
        """Asks for the release title once, if the project uses release titles."""
        if not self._title_prompted:
            self._title_prompted = True
            if self.config.use_release_title:
                self._title = prompt_input("Please provide a title for the release:")
        return self._title

    def build_render_context(self) -> RenderContext:
        return RenderContext(
            commits=self.commits,
            github=self.github_config,
            version=self.version.format(),
            group_order=self.config.group_order,
            hidden_scopes=self.config.hidden_scopes,
            title=self.prompt_for_release_title(),
            date=self.release_date,
        )
