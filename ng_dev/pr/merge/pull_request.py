"""Loads a pull request for merging and validates that it can be merged."""

from dataclasses import dataclass, field

import structlog

from ng_dev.commit_message.parse import parse_commit_message
from ng_dev.configuration.models import NgDevConfig, PullRequestConfig
from ng_dev.github.abc import GitHubClientBase
from ng_dev.npm.registry import NpmRegistryClientBase
from ng_dev.pr.common.failures import PullRequestFailure
from ng_dev.pr.common.fetch import fetch_pull_request_from_github
from ng_dev.pr.common.targeting import (
    InvalidTargetBranchError,
    InvalidTargetLabelError,
    TargetLabel,
    get_matching_target_label_for_pull_request,
    get_target_labels_for_active_release_trains,
)
from ng_dev.pr.common.validation import (
    PullRequestValidationConfig,
    PullRequestValidationFailure,
    PullRequestValidationInput,
    assert_valid_pull_request,
)
from ng_dev.release.versioning import ActiveReleaseTrains, fetch_active_release_trains
from ng_dev.utils.helpers import has_matching_label

logger = structlog.get_logger(__name__)


@dataclass
class PullRequest:
    """A validated pull request that is ready to be merged."""

    url: str
    pr_number: int
    title: str
    labels: list[str]
    github_target_branch: str
    target_branches: list[str]
    commit_count: int
    required_base_sha: str | None = None
    needs_commit_message_fixup: bool = False
    has_caretaker_note: bool = False
    ignored_failures: list[PullRequestValidationFailure] = field(default_factory=list)


async def load_and_validate_pull_request(
    github: GitHubClientBase,
    registry: NpmRegistryClientBase,
    config: NgDevConfig,
    pr_number: int,
    validation_config: PullRequestValidationConfig | None = None,
    ignore_non_fatal_failures: bool = False,
) -> PullRequest:
    """Loads the pull request from GitHub and validates it against the merge requirements.

    Raises:
        PullRequestFailure: If the pull request cannot be found or fails a validation.
    """
    pull_request_config = config.pull_request or PullRequestConfig()
    validation_config = validation_config or PullRequestValidationConfig()

    pull_request = await fetch_pull_request_from_github(github, pr_number)
    if pull_request is None:
        raise PullRequestFailure.not_found()

    labels = pull_request.label_names
    github_target_branch = pull_request.base_ref_name
    commits = [parse_commit_message(message) for message in pull_request.commit_messages]

    target_label: TargetLabel | None = None
    release_trains: ActiveReleaseTrains | None = None
    if not pull_request_config.no_target_labeling:
        next_branch_name = config.github.main_branch_name if config.github is not None else "main"
        release_trains = await fetch_active_release_trains(github, next_branch_name)
        target_labels = get_target_labels_for_active_release_trains(release_trains, github, registry, config)
        try:
            target_label = get_matching_target_label_for_pull_request(pull_request_config, labels, target_labels)
        except InvalidTargetLabelError as exc:
            raise PullRequestFailure(exc.failure_message) from exc

    ignored_failures = assert_valid_pull_request(
        PullRequestValidationInput(
            pull_request=pull_request,
            commits=commits,
            config=pull_request_config,
            target_label=target_label,
            release_trains=release_trains,
            labels=labels,
        ),
        validation_config,
        ignore_non_fatal_failures,
    )

    # Target labels may compute their branches lazily and reject the branch selected in the UI.
    if target_label is None:
        target_branches = [config.github.main_branch_name if config.github is not None else "main"]
    else:
        try:
            target_branches = await target_label.branches(github_target_branch)
        except (InvalidTargetLabelError, InvalidTargetBranchError) as exc:
            raise PullRequestFailure(exc.failure_message) from exc

    logger.debug("Loaded and validated pull request", pr_number=pr_number, target_branches=target_branches)
    return PullRequest(
        url=pull_request.url,
        pr_number=pr_number,
        title=pull_request.title,
        labels=labels,
        github_target_branch=github_target_branch,
        target_branches=target_branches,
        commit_count=pull_request.commits.total_count,
        required_base_sha=pull_request_config.required_base_commits.get(github_target_branch),
        needs_commit_message_fixup=has_matching_label(labels, pull_request_config.commit_message_fixup_label),
        has_caretaker_note=has_matching_label(labels, pull_request_config.caretaker_note_label),
        ignored_failures=ignored_failures,
    )
