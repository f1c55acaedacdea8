"""Parses the groups of the PullApprove configuration."""

from typing import Any

from ng_dev.pullapprove.group import PullApproveGroup
from ng_dev.utils.yaml import load_yaml_string


def parse_pullapprove_yaml(raw_yaml: str) -> dict[str, Any]:
    """Parses the configuration, resolving YAML merge keys."""
    return load_yaml_string(raw_yaml) or {}


def get_groups_from_yaml(raw_yaml: str) -> list[PullApproveGroup]:
    """Creates the groups of the configuration, each aware of the groups preceding it."""
    groups: list[PullApproveGroup] = []
    for group_name, group_config in (parse_pullapprove_yaml(raw_yaml).get("groups") or {}).items():
        groups.append(PullApproveGroup(group_name, group_config or {}, list(groups)))
    return groups
