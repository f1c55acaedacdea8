"""Console output of the PullApprove verification."""

from typing import Callable, Literal

import structlog

from ng_dev.pullapprove.group import PullApproveGroupResult
from ng_dev.utils.console import info

logger = structlog.get_logger(__name__)

ConditionsToPrint = Literal["matched_conditions", "unmatched_conditions", "unverifiable_conditions"]


def log_group(
    group: PullApproveGroupResult, conditions_to_print: ConditionsToPrint, print_fn: Callable[[str], None] = info
) -> None:
    """Prints the conditions of a group, with the number of files each matched."""
    conditions = getattr(group, conditions_to_print)
    print_fn(f"  [{group.group_name}]")
    for condition in conditions:
        count = len(condition.matched_files)
        if conditions_to_print == "unverifiable_conditions":
            print_fn(f"    {condition.expression}")
        else:
            print_fn(f"    {count} {'match' if count == 1 else 'matches'} - {condition.expression}")


def log_header(*params: str) -> None:
    """Prints a header within a text drawn box."""
    fill_width = 78
    header_text = " ".join(params)[:fill_width]
    left_space = -(-(fill_width - len(header_text)) // 2)
    right_space = fill_width - left_space - len(header_text)
    info(f"┌{'─' * fill_width}┐")
    info(f"│{' ' * left_space}{header_text}{' ' * right_space}│")
    info(f"└{'─' * fill_width}┘")


def debug(message: str) -> None:
    """Records details that are only of interest with debug logging enabled."""
    logger.debug(message.strip())
