"""Target labels and the branches a pull request is merged into.

A target label is applied to a pull request to declare which release trains its
changes should land on. The branches for each label are derived from the active
release trains of the repository.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

import structlog

from ng_dev.commit_message.parse import Commit
from ng_dev.configuration.exceptions import ConfigValidationError
from ng_dev.configuration.loader import assert_valid_release_config
from ng_dev.configuration.models import NgDevConfig, PullRequestConfig, ReleaseConfig
from ng_dev.github.abc import GitHubClientBase
from ng_dev.npm.registry import NpmRegistryClientBase
from ng_dev.pr.common.failures import PullRequestFailure
from ng_dev.release.versioning import (
    ActiveReleaseTrains,
    SemVer,
    compute_lts_end_date_of_major,
    fetch_active_release_trains,
    get_lts_npm_dist_tag_of_major,
    get_version_of_branch,
    is_version_branch,
)
from ng_dev.release.versioning.long_term_support import parse_npm_timestamp
from ng_dev.utils.console import is_interactive, prompt_confirm, prompt_select, red, warn, yellow
from ng_dev.utils.helpers import has_matching_label

logger = structlog.get_logger(__name__)


class TargetLabelName(str, Enum):
    """Names of the target labels that can be applied to a pull request."""

    MAJOR = "target: major"
    MINOR = "target: minor"
    PATCH = "target: patch"
    RELEASE_CANDIDATE = "target: rc"
    LONG_TERM_SUPPORT = "target: lts"
    FEATURE_BRANCH = "target: feature"


class InvalidTargetLabelError(Exception):
    """Raised when the target labels of a pull request are invalid."""

    def __init__(self, failure_message: str) -> None:
        super().__init__(failure_message)
        self.failure_message = failure_message


class InvalidTargetBranchError(Exception):
    """Raised when a pull request targets a branch its target label does not allow."""

    def __init__(self, failure_message: str) -> None:
        super().__init__(failure_message)
        self.failure_message = failure_message


@dataclass(frozen=True)
class TargetLabel:
    """A target label and how to compute its branches from the branch chosen in the GitHub UI."""

    name: TargetLabelName
    branches: Callable[[str], Awaitable[list[str]]]


async def assert_active_lts_branch(
    github: GitHubClientBase,
    registry: NpmRegistryClientBase,
    release_config: ReleaseConfig,
    branch_name: str,
    today: datetime | None = None,
) -> None:
    """Asserts that the branch is the version-branch of an active LTS major.

    Raises:
        InvalidTargetBranchError: If no LTS version is tagged for the major, the branch is not
            its last-minor branch, or long-term support ended and the operator declines to force.
    """
    version = await get_version_of_branch(github, branch_name)
    info = await registry.fetch_package_info(release_config.npm_packages[0])
    lts_npm_tag = get_lts_npm_dist_tag_of_major(version.major)
    raw_lts_version = info.get("dist-tags", {}).get(lts_npm_tag)
    lts_version = SemVer.try_parse(raw_lts_version) if raw_lts_version else None

    if lts_version is None:
        raise InvalidTargetBranchError(f"No LTS version tagged for v{version.major} in NPM.")

    if branch_name != f"{lts_version.major}.{lts_version.minor}.x":
        raise InvalidTargetBranchError(
            f"Not using last-minor branch for v{version.major} LTS version. PR "
            f"should be updated to target: {lts_version.major}.{lts_version.minor}.x"
        )

    now = today if today is not None else datetime.now(timezone.utc)
    major_release_date = parse_npm_timestamp(info["time"][f"{version.major}.0.0"])
    lts_end_date = compute_lts_end_date_of_major(major_release_date)
    if now <= lts_end_date:
        return

    lts_end_date_text = lts_end_date.strftime("%m/%d/%Y")
    warn(red(f"Long-term support ended for v{version.major} on {lts_end_date_text}."))
    warn(yellow("Merging of pull requests for this major is generally not desired, but can be forcibly ignored."))
    if is_interactive() and prompt_confirm("Do you want to forcibly proceed with merging?"):
        return
    raise InvalidTargetBranchError(
        f"Long-term supported ended for v{version.major} on {lts_end_date_text}. "
        f"Pull request cannot be merged into the {branch_name} branch."
    )


def get_target_labels_for_active_release_trains(
    active: ActiveReleaseTrains,
    github: GitHubClientBase,
    registry: NpmRegistryClientBase,
    config: NgDevConfig,
) -> list[TargetLabel]:
    """Gets the target labels the merge tooling considers for the active release trains."""
    next_branch_name = active.next.branch_name
    latest = active.latest
    release_candidate = active.release_candidate

    async def major_branches(github_target_branch: str) -> list[str]:
        # `target: major` is only allowed while the next branch is designated to become a major.
        if not active.next.is_major:
            raise InvalidTargetLabelError(f'Unable to merge pull request. The "{next_branch_name}" branch will be released as a minor version.')
        return [next_branch_name]

    async def minor_branches(github_target_branch: str) -> list[str]:
        return [next_branch_name]

    async def patch_branches(github_target_branch: str) -> list[str]:
        # A PR opened against the latest version-branch directly only lands there.
        if github_target_branch == latest.branch_name:
            return [latest.branch_name]
        branches = [next_branch_name, latest.branch_name]
        if release_candidate is not None:
            branches.append(release_candidate.branch_name)
        return branches

    async def release_candidate_branches(github_target_branch: str) -> list[str]:
        if release_candidate is None:
            raise InvalidTargetLabelError('No active feature-freeze/release-candidate branch. Unable to merge pull request using "target: rc" label.')
        if github_target_branch == release_candidate.branch_name:
            return [release_candidate.branch_name]
        return [next_branch_name, release_candidate.branch_name]

    async def feature_branches(github_target_branch: str) -> list[str]:
        if github_target_branch == next_branch_name or is_version_branch(github_target_branch):
            raise InvalidTargetBranchError('"target: feature" pull requests cannot target a releasable branch')
        return [github_target_branch]

    target_labels = [
        TargetLabel(TargetLabelName.MAJOR, major_branches),
        TargetLabel(TargetLabelName.MINOR, minor_branches),
        TargetLabel(TargetLabelName.PATCH, patch_branches),
        TargetLabel(TargetLabelName.RELEASE_CANDIDATE, release_candidate_branches),
        TargetLabel(TargetLabelName.FEATURE_BRANCH, feature_branches),
    ]

    # LTS branches can only be determined from NPM when packages are configured for releasing.
    try:
        release_config = assert_valid_release_config(config)
    except ConfigValidationError:
        logger.debug("LTS target label not included in target labels as no valid release configuration was found")
        return target_labels

    async def lts_branches(github_target_branch: str) -> list[str]:
        # LTS changes are not cherry-picked; authors open separate PRs against each LTS branch.
        if not is_version_branch(github_target_branch):
            raise InvalidTargetBranchError(f'PR cannot be merged as it does not target a long-term support branch: "{github_target_branch}"')
        if github_target_branch == latest.branch_name:
            raise InvalidTargetBranchError(
                'PR cannot be merged with "target: lts" into patch branch. Consider changing the label to "target: patch" if this is intentional.'
            )
        if release_candidate is not None and github_target_branch == release_candidate.branch_name:
            raise InvalidTargetBranchError(
                'PR cannot be merged with "target: lts" into feature-freeze/release-candidate branch. '
                'Consider changing the label to "target: rc" if this is intentional.'
            )
        await assert_active_lts_branch(github, registry, release_config, github_target_branch)
        return [github_target_branch]

    target_labels.append(TargetLabel(TargetLabelName.LONG_TERM_SUPPORT, lts_branches))
    return target_labels


def get_matching_target_label_for_pull_request(
    config: PullRequestConfig,
    labels_on_pull_request: list[str],
    all_target_labels: list[TargetLabel],
) -> TargetLabel:
    """Gets the single target label applied to the pull request.

    When multiple target labels are applied, an interactive operator is asked to pick one.

    Raises:
        InvalidTargetLabelError: If no target label, or multiple target labels in a
            non-interactive session, are applied.
    """
    if config.no_target_labeling:
        raise InvalidTargetLabelError("This repository does not use target labels.")

    matches = [label for label in all_target_labels if label.name.value in labels_on_pull_request]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        raise InvalidTargetLabelError("Unable to determine target for the PR as it has no target label.")
    if is_interactive():
        index = prompt_select("The pull request has multiple target labels. Select the label to use:", [label.name.value for label in matches])
        return matches[index]
    raise InvalidTargetLabelError("Unable to determine target for the PR as it has multiple target labels.")


def assert_changes_allow_for_target_label(
    commits: list[Commit],
    label: TargetLabel,
    config: PullRequestConfig,
    release_trains: ActiveReleaseTrains,
    labels_on_pull_request: list[str],
) -> None:
    """Asserts that the commits of a pull request may land in the branches of its target label.

    Raises:
        PullRequestFailure: If the commits contain changes the target label does not allow.
    """
    if has_matching_label(labels_on_pull_request, config.commit_message_fixup_label):
        logger.debug("Skipping commit message target label validation because the commit message fixup label is applied.")
        return

    exempted_scopes = config.target_label_exempt_scopes
    commits = [commit for commit in commits if commit.scope not in exempted_scopes]
    has_breaking_changes = any(commit.breaking_changes for commit in commits)
    has_deprecations = any(commit.deprecations for commit in commits)
    has_feature_commits = any(commit.type == "feat" for commit in commits)

    if label.name == TargetLabelName.MAJOR:
        return
    if label.name == TargetLabelName.MINOR:
        if has_breaking_changes:
            raise PullRequestFailure.has_breaking_changes(label.name.value)
    elif label.name in (TargetLabelName.RELEASE_CANDIDATE, TargetLabelName.LONG_TERM_SUPPORT, TargetLabelName.PATCH):
        if has_breaking_changes:
            raise PullRequestFailure.has_breaking_changes(label.name.value)
        if has_feature_commits:
            raise PullRequestFailure.has_feature_commits(label.name.value)
        # Deprecations belong in minor or major releases, which a feature-freeze still is.
        if has_deprecations and not release_trains.is_feature_freeze():
            raise PullRequestFailure.has_deprecations(label.name.value)
    else:
        warn(red("WARNING: Unable to confirm all commits in the pull request are eligible to be"))
        warn(red(f"merged into the target branch: {label.name.value}"))


async def get_target_branches_for_pull_request(
    github: GitHubClientBase,
    registry: NpmRegistryClientBase,
    config: NgDevConfig,
    labels_on_pull_request: list[str],
    github_target_branch: str,
    commits: list[Commit],
) -> list[str]:
    """Gets the branches the pull request should be merged into.

    Raises:
        InvalidTargetLabelError: If the target labels of the pull request are invalid.
        InvalidTargetBranchError: If the branch selected in the GitHub UI is invalid.
        PullRequestFailure: If the commits are not allowed for the target label.
    """
    pull_request_config = config.pull_request or PullRequestConfig()
    github_config = config.github
    next_branch_name = github_config.main_branch_name if github_config is not None else "main"
    if pull_request_config.no_target_labeling:
        return [next_branch_name]

    release_trains = await fetch_active_release_trains(github, next_branch_name)
    target_labels = get_target_labels_for_active_release_trains(release_trains, github, registry, config)
    label = get_matching_target_label_for_pull_request(pull_request_config, labels_on_pull_request, target_labels)
    branches = await label.branches(github_target_branch)
    assert_changes_allow_for_target_label(commits, label, pull_request_config, release_trains, labels_on_pull_request)
    logger.debug("Determined target branches", label=label.name.value, branches=branches)
    return branches
