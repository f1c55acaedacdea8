"""Release action moving a recently published major to the ``latest`` NPM dist tag."""

from ng_dev.configuration.models import ReleaseConfig
from ng_dev.npm.registry import NpmRegistryClientBase
from ng_dev.release.publish.actions.base import ReleaseAction
from ng_dev.release.publish.external_commands import invoke_set_npm_dist_command, invoke_yarn_install_command
from ng_dev.release.versioning import ActiveReleaseTrains, SemVer


class TagRecentMajorAsLatest(ReleaseAction):
    """Tags the recently published major as ``latest`` once it was published to ``next``."""

    @classmethod
    async def is_active(cls, active: ActiveReleaseTrains, config: ReleaseConfig, registry: NpmRegistryClientBase) -> bool:
        latest_version = active.latest.version
        # The latest release train has not been released as a new major recently, e.g. 10.0.2.
        if latest_version.minor != 0 or latest_version.patch != 0:
            return False
        package_info = await registry.fetch_package_info(config.npm_packages[0])
        npm_latest_version = SemVer.try_parse(package_info.get("dist-tags", {}).get("latest", ""))
        # Only the previous major may currently be tagged as latest.
        return npm_latest_version is not None and npm_latest_version.major == latest_version.major - 1

    async def get_description(self) -> str:
        return f'Tag recently published major v{self.active.latest.version} as "latest" in NPM.'

    async def perform(self) -> None:
        self.checkout_upstream_branch(self.active.latest.branch_name)
        invoke_yarn_install_command(self.project_dir)
        invoke_set_npm_dist_command(self.project_dir, "latest", self.active.latest.version)
