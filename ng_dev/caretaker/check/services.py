"""Caretaker check module showing the status of services the project relies on."""

from dataclasses import dataclass
from datetime import datetime

import httpx
import structlog

from ng_dev.caretaker.check.base import BaseModule, indent, pad_labels
from ng_dev.utils.console import bold, info

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ServiceConfig:
    name: str
    url: str


@dataclass(frozen=True)
class StatusCheckResult:
    """Status reported by a service status page."""

    name: str
    status: str
    description: str
    last_updated: datetime


SERVICES = [
    ServiceConfig("Saucelabs", "https://status.us-west-1.saucelabs.com/api/v2/status.json"),
    ServiceConfig("Npm", "https://status.npmjs.org/api/v2/status.json"),
    ServiceConfig("CircleCi", "https://status.circleci.com/api/v2/status.json"),
    ServiceConfig("Github", "https://www.githubstatus.com/api/v2/status.json"),
]


class ServicesModule(BaseModule[list[StatusCheckResult]]):
    """Reads the standard status page API of each service."""

    timeout: float = 30.0

    async def retrieve_data(self) -> list[StatusCheckResult]:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return [await self.get_status_from_standard_api(client, service) for service in SERVICES]

    async def get_status_from_standard_api(self, client: httpx.AsyncClient, service: ServiceConfig) -> StatusCheckResult:
        """Retrieves the status of a service using the statuspage.io response format."""
        logger.debug("Fetching service status", service=service.name, url=service.url)
        response = await client.get(service.url)
        response.raise_for_status()
        payload = response.json()
        return StatusCheckResult(
            name=service.name,
            status="passing" if payload["status"]["indicator"] == "none" else "failing",
            description=payload["status"]["description"],
            last_updated=datetime.fromisoformat(payload["page"]["updated_at"]),
        )

    def print_to_terminal(self) -> None:
        statuses = self.data or []
        width = pad_labels([status.name for status in statuses])
        info(bold("Service Statuses"))
        for status in statuses:
            name = status.name.ljust(width)
            if status.status == "passing":
                info(indent(f"{name} ✅"))
            else:
                info(indent(f"{name} ❌ (Updated: {status.last_updated:%Y-%m-%d %H:%M:%S})"))
                info(indent(f"Details: {status.description}", 2))
        info()
