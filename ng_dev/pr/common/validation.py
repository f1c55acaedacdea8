"""Validations a pull request has to pass before it can be merged.

The validations form a closed set of kinds. Each kind maps to a predicate raising a
``PullRequestFailure`` and to whether its failures can be forcibly ignored by the
caretaker.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

import structlog

from ng_dev.commit_message.parse import Commit
from ng_dev.configuration.models import PullRequestConfig
from ng_dev.pr.common.failures import PullRequestFailure
from ng_dev.pr.common.fetch import PullRequestFromGithub
from ng_dev.pr.common.targeting import TargetLabel, assert_changes_allow_for_target_label
from ng_dev.release.versioning import ActiveReleaseTrains
from ng_dev.utils.helpers import has_matching_label

logger = structlog.get_logger(__name__)


class PullRequestValidationKind(str, Enum):
    """The validations that can be run against a pull request, in the order they run."""

    PENDING = "assert_pending"
    MERGE_READY = "assert_merge_ready"
    SIGNED_CLA = "assert_signed_cla"
    CHANGES_ALLOW_FOR_TARGET_LABEL = "assert_changes_allow_for_target_label"
    PASSING_CI = "assert_passing_ci"
    CORRECT_BREAKING_CHANGE_LABELING = "assert_correct_breaking_change_labeling"


class PullRequestValidationFailure(PullRequestFailure):
    """A failed pull request validation."""

    def __init__(self, message: str, kind: PullRequestValidationKind, can_be_force_ignored: bool) -> None:
        super().__init__(message, non_fatal=can_be_force_ignored)
        self.kind = kind
        self.can_be_force_ignored = can_be_force_ignored


@dataclass
class PullRequestValidationConfig:
    """Which validations run for a pull request. Disabled validations are skipped entirely."""

    assert_pending: bool = True
    assert_merge_ready: bool = True
    assert_signed_cla: bool = True
    assert_changes_allow_for_target_label: bool = True
    assert_passing_ci: bool = True
    assert_correct_breaking_change_labeling: bool = True

    def is_enabled(self, kind: PullRequestValidationKind) -> bool:
        """Whether the validation of the given kind is enabled."""
        enabled: bool = getattr(self, kind.value)
        return enabled


@dataclass
class PullRequestValidationInput:
    """Everything the validations inspect about a pull request."""

    pull_request: PullRequestFromGithub
    commits: list[Commit]
    config: PullRequestConfig
    target_label: TargetLabel | None = None
    release_trains: ActiveReleaseTrains | None = None
    labels: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.labels:
            self.labels = self.pull_request.label_names


def _assert_pending(validation_input: PullRequestValidationInput) -> None:
    pull_request = validation_input.pull_request
    if pull_request.is_draft:
        raise PullRequestFailure.is_draft()
    if pull_request.state == "CLOSED":
        raise PullRequestFailure.is_closed()
    if pull_request.state == "MERGED":
        raise PullRequestFailure.is_merged()


def _assert_merge_ready(validation_input: PullRequestValidationInput) -> None:
    if not has_matching_label(validation_input.labels, validation_input.config.merge_ready_label):
        raise PullRequestFailure.not_merge_ready()


def _assert_signed_cla(validation_input: PullRequestValidationInput) -> None:
    if not has_matching_label(validation_input.labels, validation_input.config.cla_signed_label):
        raise PullRequestFailure.cla_unsigned()


def _assert_changes_allow_for_target_label(validation_input: PullRequestValidationInput) -> None:
    # Without target labeling there is no label to restrict the changes.
    if validation_input.target_label is None or validation_input.release_trains is None:
        return
    assert_changes_allow_for_target_label(
        validation_input.commits,
        validation_input.target_label,
        validation_input.config,
        validation_input.release_trains,
        validation_input.labels,
    )


def _assert_passing_ci(validation_input: PullRequestValidationInput) -> None:
    combined_status = validation_input.pull_request.combined_status
    if combined_status in ("PENDING", "EXPECTED"):
        raise PullRequestFailure.pending_ci_jobs()
    if combined_status in ("FAILURE", "ERROR"):
        raise PullRequestFailure.failing_ci_jobs()


def _assert_correct_breaking_change_labeling(validation_input: PullRequestValidationInput) -> None:
    breaking_change_label = validation_input.config.breaking_change_label
    has_label = has_matching_label(validation_input.labels, breaking_change_label)
    has_commit = any(commit.breaking_changes for commit in validation_input.commits)
    if not has_label and has_commit:
        raise PullRequestFailure.missing_breaking_change_label(breaking_change_label)
    if has_label and not has_commit:
        raise PullRequestFailure.missing_breaking_change_commit()


VALIDATIONS: dict[PullRequestValidationKind, tuple[Callable[[PullRequestValidationInput], None], bool]] = {
    PullRequestValidationKind.PENDING: (_assert_pending, False),
    PullRequestValidationKind.MERGE_READY: (_assert_merge_ready, False),
    PullRequestValidationKind.SIGNED_CLA: (_assert_signed_cla, False),
    PullRequestValidationKind.CHANGES_ALLOW_FOR_TARGET_LABEL: (_assert_changes_allow_for_target_label, False),
    PullRequestValidationKind.PASSING_CI: (_assert_passing_ci, True),
    PullRequestValidationKind.CORRECT_BREAKING_CHANGE_LABELING: (_assert_correct_breaking_change_labeling, False),
}
"""Predicate and whether its failures can be forcibly ignored, per validation kind."""


def assert_valid_pull_request(
    validation_input: PullRequestValidationInput,
    validation_config: PullRequestValidationConfig,
    ignore_non_fatal_failures: bool = False,
) -> list[PullRequestValidationFailure]:
    """Runs the enabled validations against a pull request.

    Returns:
        The failures that were forcibly ignored.

    Raises:
        PullRequestValidationFailure: The first failure that is not ignored.
    """
    ignored_failures: list[PullRequestValidationFailure] = []
    for kind, (predicate, can_be_force_ignored) in VALIDATIONS.items():
        if not validation_config.is_enabled(kind):
            continue
        try:
            predicate(validation_input)
        except PullRequestFailure as exc:
            failure = PullRequestValidationFailure(exc.message, kind, can_be_force_ignored)
            if not (can_be_force_ignored and ignore_non_fatal_failures):
                raise failure from exc
            logger.info("Ignoring pull request validation failure", validation=kind.value, message=failure.message)
            ignored_failures.append(failure)
    return ignored_failures
