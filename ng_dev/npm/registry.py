"""Clients for querying package information from an NPM registry."""

from abc import ABC, abstractmethod
from typing import Any

import httpx
import structlog

logger = structlog.get_logger(__name__)


class NpmRegistryClientBase(ABC):
    """Base ABC for NPM registry clients."""

    @abstractmethod
    async def fetch_package_info(self, package_name: str) -> dict[str, Any]:
        """Fetch the registry document of a package (``dist-tags``, ``versions``, ``time``)."""
        pass


class HttpxNpmRegistryClient(NpmRegistryClientBase):
    """Fetches package documents from an NPM registry over HTTP.

    Responses are cached per process because registry documents are large and slow to
    retrieve, and are requested repeatedly while determining release trains.
    """

    def __init__(self, registry_url: str = "https://registry.npmjs.org", timeout: float = 30.0) -> None:
        """Initialize the client for the given registry."""
        self.registry_url = registry_url.rstrip("/")
        self.timeout = timeout
        self._cache: dict[str, dict[str, Any]] = {}

    async def fetch_package_info(self, package_name: str) -> dict[str, Any]:
        """Fetch the registry document of a package."""
        if package_name not in self._cache:
            url = f"{self.registry_url}/{package_name}"
            logger.debug("Fetching package from NPM registry", url=url)
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url)
                response.raise_for_status()
            self._cache[package_name] = response.json()
        return self._cache[package_name]


async def is_version_published_to_npm(registry: NpmRegistryClientBase, package_name: str, version: str) -> bool:
    """Whether the given version of a package is published to the registry."""
    info = await registry.fetch_package_info(package_name)
    return version in info.get("versions", {})
