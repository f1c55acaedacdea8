"""List types mimicking the ``files`` and ``groups`` values available in PullApprove conditions."""

import re
from typing import TYPE_CHECKING

from ng_dev.utils.glob import matches_glob

if TYPE_CHECKING:
    from ng_dev.pullapprove.group import PullApproveGroup


class GroupStateDependencyError(Exception):
    """Raised when a condition depends on the review state of groups, which cannot be verified statically."""

    pass


class PullApproveStringArray(list[str]):
    """The files of a pull request, as available in conditions."""

    def include(self, pattern: str) -> "PullApproveStringArray":
        """Returns the files matching the glob pattern."""
        return PullApproveStringArray(file for file in self if matches_glob(file, pattern))

    def exclude(self, pattern: str) -> "PullApproveStringArray":
        """Returns the files not matching the glob pattern."""
        return PullApproveStringArray(file for file in self if not matches_glob(file, pattern))


class PullApproveGroupArray(list["PullApproveGroup"]):
    """The groups preceding a group in the configuration, as available in conditions."""

    def include(self, pattern: str) -> "PullApproveGroupArray":
        return PullApproveGroupArray(group for group in self if re.search(pattern, group.group_name))

    def exclude(self, pattern: str) -> "PullApproveGroupArray":
        return PullApproveGroupArray(group for group in self if not re.search(pattern, group.group_name))

    @property
    def names(self) -> list[str]:
        return [group.group_name for group in self]

    @property
    def pending(self) -> list[str]:
        raise GroupStateDependencyError()

    @property
    def active(self) -> list[str]:
        raise GroupStateDependencyError()

    @property
    def inactive(self) -> list[str]:
        raise GroupStateDependencyError()

    @property
    def rejected(self) -> list[str]:
        raise GroupStateDependencyError()

    @property
    def approved(self) -> list[str]:
        raise GroupStateDependencyError()
