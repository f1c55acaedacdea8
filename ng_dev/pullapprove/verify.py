"""Verifies that the PullApprove configuration covers all files of the repository."""

from pathlib import Path

import structlog

from ng_dev.pullapprove.group import PullApproveGroup
from ng_dev.pullapprove.logging import debug, log_group, log_header
from ng_dev.pullapprove.parse_yaml import get_groups_from_yaml
from ng_dev.utils.console import info
from ng_dev.utils.constants import PULLAPPROVE_CONFIG_PATH

logger = structlog.get_logger(__name__)


def verify(base_dir: Path, repo_files: list[str]) -> bool:
    """Verifies the PullApprove configuration of the repository and prints the results.

    Verification succeeds when every condition matches at least one file, every file is
    matched by a group and every group defines reviewers.

    Raises:
        ConditionParseError: If a condition cannot be parsed.
        ConditionEvaluationError: If a condition cannot be evaluated.
    """
    raw_yaml = (base_dir / PULLAPPROVE_CONFIG_PATH).read_text(encoding="utf-8")
    groups = get_groups_from_yaml(raw_yaml)
    return verify_groups(groups, repo_files)


def verify_groups(groups: list[PullApproveGroup], repo_files: list[str]) -> bool:
    # Groups without conditions are always active and would never leave files unmatched.
    groups_skipped = [group for group in groups if not group.conditions]
    groups_with_conditions = [group for group in groups if group.conditions]

    matched_files: list[str] = []
    unmatched_files: list[str] = []
    for file in repo_files:
        # Every group records its matches, so all groups are tested for every file.
        if [group for group in groups_with_conditions if group.test_file(file)]:
            matched_files.append(file)
        else:
            unmatched_files.append(file)

    results_by_group = [group.get_results() for group in groups_with_conditions]
    all_group_conditions_valid = all(not result.unmatched_count for result in results_by_group) and not unmatched_files
    groups_without_reviewers = [group for group in groups if not group.reviewers]
    overall_result = all_group_conditions_valid and not groups_without_reviewers
    logger.debug("Verified PullApprove configuration", groups=len(groups), files=len(repo_files), success=overall_result)

    log_header("Overall Result")
    if overall_result:
        info("PullApprove verification succeeded!")
    else:
        info("PullApprove verification failed.")
        info()
        info("Please update '.pullapprove.yml' to ensure that all necessary")
        info("files/directories have owners and all patterns that appear in")
        info("the file correspond to actual files/directories in the repo.")

    log_header("Group Reviewers Check")
    if not groups_without_reviewers:
        info("All group contain at least one reviewer user or team.")
    else:
        info(f"Discovered {len(groups_without_reviewers)} group(s) without a reviewer defined")
        for group in groups_without_reviewers:
            info(f"  {group.group_name}")

    log_header("PullApprove results by file")
    info(f"Matched Files ({len(matched_files)} files)")
    for file in matched_files:
        debug(file)
    info(f"Unmatched Files ({len(unmatched_files)} files)")
    for file in unmatched_files:
        info(f"  {file}")

    log_header("PullApprove results by group")
    info(f"Groups skipped ({len(groups_skipped)} groups)")
    for group in groups_skipped:
        debug(group.group_name)
    matched_groups = [result for result in results_by_group if not result.unmatched_count]
    info(f"Matched conditions by Group ({len(matched_groups)} groups)")
    for result in matched_groups:
        log_group(result, "matched_conditions", debug)
    unmatched_groups = [result for result in results_by_group if result.unmatched_count]
    info(f"Unmatched conditions by Group ({len(unmatched_groups)} groups)")
    for result in unmatched_groups:
        log_group(result, "unmatched_conditions")
    unverifiable_groups = [result for result in results_by_group if result.unverifiable_conditions]
    info(f"Unverifiable conditions by Group ({len(unverifiable_groups)} groups)")
    for result in unverifiable_groups:
        log_group(result, "unverifiable_conditions")

    return overall_result
