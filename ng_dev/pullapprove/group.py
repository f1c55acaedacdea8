"""PullApprove groups and the files matched by their conditions."""

import re
from dataclasses import dataclass, field
from typing import Any

import structlog

from ng_dev.pullapprove.arrays import GroupStateDependencyError
from ng_dev.pullapprove.condition_evaluator import ConditionFunction, convert_condition_to_function

logger = structlog.get_logger(__name__)

# Conditions for the global approval groups are not verified.
GLOBAL_APPROVAL_CONDITION_PATTERN = re.compile(r'^"global-(docs-)?approvers" not in groups.approved$')


class ConditionEvaluationError(Exception):
    """Raised when a condition fails to evaluate for a file."""

    def __init__(self, group_name: str, expression: str, cause: Exception) -> None:
        super().__init__(
            f"Condition could not be evaluated: \n\nFrom the [{group_name}] group:\n - {expression}\n\n{cause}"
        )
        self.group_name = group_name
        self.expression = expression


@dataclass
class GroupCondition:
    """A condition of a group together with the files it matched."""

    expression: str
    check_fn: ConditionFunction
    matched_files: set[str] = field(default_factory=set)
    unverifiable: bool = False


@dataclass
class PullApproveGroupResult:
    group_name: str
    matched_conditions: list[GroupCondition]
    unmatched_conditions: list[GroupCondition]
    unverifiable_conditions: list[GroupCondition]

    @property
    def matched_count(self) -> int:
        return len(self.matched_conditions)

    @property
    def unmatched_count(self) -> int:
        return len(self.unmatched_conditions)


class PullApproveGroup:
    """A PullApprove group that files can be tested against."""

    def __init__(self, group_name: str, config: dict[str, Any], preceding_groups: list["PullApproveGroup"] | None = None) -> None:
        self.group_name = group_name
        self.preceding_groups = preceding_groups or []
        self.conditions: list[GroupCondition] = []
        self.reviewers: dict[str, Any] = config.get("reviewers") or {}
        self._capture_conditions(config)

    def _capture_conditions(self, config: dict[str, Any]) -> None:
        for condition in config.get("conditions") or []:
            expression = condition.strip()
            if GLOBAL_APPROVAL_CONDITION_PATTERN.match(expression):
                continue
            self.conditions.append(GroupCondition(expression, convert_condition_to_function(expression)))

    def test_file(self, file_path: str) -> bool:
        """Whether the group's conditions all match the file, recording the match on each condition.

        Raises:
            ConditionEvaluationError: If a condition fails for a reason other than depending on group states.
        """
        for condition in self.conditions:
            try:
                matches_file = condition.check_fn([file_path], self.preceding_groups)
            except GroupStateDependencyError:
                # Conditions on group states cannot be verified. They do not stop the evaluation.
                condition.unverifiable = True
                continue
            except Exception as exc:
                raise ConditionEvaluationError(self.group_name, condition.expression, exc) from exc
            if not matches_file:
                return False
            condition.matched_files.add(file_path)
        return True

    def get_results(self) -> PullApproveGroupResult:
        """Gets the matched, unmatched and unverifiable conditions of the group."""
        return PullApproveGroupResult(
            group_name=self.group_name,
            matched_conditions=[c for c in self.conditions if c.matched_files],
            unmatched_conditions=[c for c in self.conditions if not c.matched_files and not c.unverifiable],
            unverifiable_conditions=[c for c in self.conditions if c.unverifiable],
        )
