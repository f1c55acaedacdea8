"""Caretaker check module showing the changes pending for the next sync into g3."""

from dataclasses import dataclass

import structlog

from ng_dev.caretaker.check.base import BaseModule, indent
from ng_dev.utils.console import bold, info
from ng_dev.utils.constants import NGBOT_CONFIG_PATH
from ng_dev.utils.glob import matches_include_and_exclude
from ng_dev.utils.yaml import load_yaml_file

logger = structlog.get_logger(__name__)

G3_BRANCH_NAME = "g3"


@dataclass
class G3StatsData:
    """Diff stats of the files synced into g3."""

    insertions: int = 0
    deletions: int = 0
    files: int = 0
    commits: int = 0


class G3Module(BaseModule[G3StatsData]):
    """Compares the upstream g3 branch with the main branch for files synced into g3."""

    async def retrieve_data(self) -> G3StatsData | None:
        file_lists = self.get_g3_file_include_and_exclude_lists()
        if file_lists is None:
            return None
        g3_sha = self.get_sha_for_branch_latest(G3_BRANCH_NAME)
        main_sha = self.get_sha_for_branch_latest(self.github_config.main_branch_name)
        if g3_sha is None or main_sha is None:
            logger.debug("Unable to retrieve the g3 or main branch", main_branch=self.github_config.main_branch_name)
            return None
        return self.get_diff_stats(g3_sha, main_sha, *file_lists)

    def get_sha_for_branch_latest(self, branch: str) -> str | None:
        """Fetches a branch from upstream and returns its sha, or None if it does not exist."""
        # ls-remote exits with status 2 when the branch does not exist.
        if self.git.run_graceful(["ls-remote", "--exit-code", self.git.get_repo_git_url(), branch]).returncode == 2:
            logger.debug("Branch does not exist on upstream, skipping", branch=branch)
            return None
        self.git.run_graceful(["fetch", "-q", self.git.get_repo_git_url(), branch])
        return self.git.run_graceful(["rev-parse", "FETCH_HEAD"]).stdout.strip()

    def get_diff_stats(self, g3_ref: str, main_ref: str, includes: list[str], excludes: list[str]) -> G3StatsData:
        """Gets the diff stats between the g3 and main refs, limited to files synced into g3."""
        stats = G3StatsData()
        stats.commits = int(self.git.run(["rev-list", "--count", f"{g3_ref}..{main_ref}"]).stdout.strip())
        numstat = self.git.run(["diff", f"{g3_ref}...{main_ref}", "--numstat"]).stdout.strip()
        for line in numstat.splitlines():
            # Lines look like "10\t5\tsrc/file.ts". Binary files report "-" for both counts.
            insertions, deletions, file_name = line.strip().split("\t", 2)
            if matches_include_and_exclude(file_name, includes, excludes):
                stats.insertions += int(insertions) if insertions.isdigit() else 0
                stats.deletions += int(deletions) if deletions.isdigit() else 0
                stats.files += 1
        return stats

    def get_g3_file_include_and_exclude_lists(self) -> tuple[list[str], list[str]] | None:
        robot_config_path = self.git.base_dir / NGBOT_CONFIG_PATH
        if not robot_config_path.is_file():
            logger.debug("No angular robot configuration file exists, skipping")
            return None
        robot_config = load_yaml_file(robot_config_path) or {}
        g3_status = (robot_config.get("merge") or {}).get("g3Status") or {}
        includes = g3_status.get("include") or []
        excludes = g3_status.get("exclude") or []
        if not includes and not excludes:
            logger.debug("No g3Status include or exclude lists are defined in the angular robot configuration")
            return None
        return includes, excludes

    def print_to_terminal(self) -> None:
        stats = self.data
        if stats is None:
            return
        info(bold("g3 branch check"))
        if stats.files == 0:
            info(indent(f"{stats.commits} commits between g3 and {self.github_config.main_branch_name}"))
            info(indent("✅  No sync is needed at this time"))
        else:
            info(
                indent(
                    f"{stats.files} files changed, {stats.insertions} insertions(+), {stats.deletions} "
                    f"deletions(-) from {stats.commits} commits will be included in the next sync"
                )
            )
        info()
