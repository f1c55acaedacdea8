"""Caretaker check module showing the CI status of the active release trains."""

from dataclasses import dataclass

import httpx
import structlog

from ng_dev.caretaker.check.base import BaseModule, indent, pad_labels
from ng_dev.release.versioning import fetch_active_release_trains
from ng_dev.utils.console import bold, info

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CiBranchStatus:
    """CI status of the branch of a release train."""

    active: bool
    name: str
    label: str
    status: str


class CiModule(BaseModule[list[CiBranchStatus]]):
    """Reads the CircleCI status badge of the branch of every active release train."""

    timeout: float = 30.0

    async def retrieve_data(self) -> list[CiBranchStatus]:
        active = await fetch_active_release_trains(self.github, self.github_config.main_branch_name)
        trains = {"releaseCandidate": active.release_candidate, "latest": active.latest, "next": active.next}
        results: list[CiBranchStatus] = []
        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
            for train_name, train in trains.items():
                if train is None:
                    results.append(CiBranchStatus(active=False, name=train_name, label="", status="not found"))
                    continue
                results.append(
                    CiBranchStatus(
                        active=True,
                        name=train.branch_name,
                        label=f"{train_name} ({train.branch_name})",
                        status=await self.get_branch_status_from_ci(client, train.branch_name),
                    )
                )
        return results

    async def get_branch_status_from_ci(self, client: httpx.AsyncClient, branch: str) -> str:
        """Gets the CI status of a branch from its CircleCI status badge."""
        url = f"https://circleci.com/gh/{self.github_config.owner}/{self.github_config.name}/tree/{branch}.svg?style=shield"
        response = await client.get(url)
        badge = response.text
        if badge and "no builds" not in badge:
            return "success" if "passing" in badge else "failed"
        return "not found"

    def print_to_terminal(self) -> None:
        results = self.data or []
        width = pad_labels([result.label for result in results])
        info(bold("CI"))
        for result in results:
            if not result.active:
                logger.debug("No active release train", train=result.name)
                continue
            label = result.label.ljust(width)
            if result.status == "not found":
                info(indent(f"{result.name} was not found on CircleCI"))
            elif result.status == "success":
                info(indent(f"{label} ✅"))
            else:
                info(indent(f"{label} ❌"))
        info()
