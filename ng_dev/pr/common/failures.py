"""Failures that prevent a pull request from being merged."""

from typing import Self


class PullRequestFailure(Exception):
    """A reason why a pull request cannot be merged.

    Non-fatal failures can be forcibly ignored by the caretaker.
    """

    def __init__(self, message: str, non_fatal: bool = False) -> None:
        """Initialize the failure with a human-readable message."""
        super().__init__(message)
        self.message = message
        self.non_fatal = non_fatal

    @classmethod
    def cla_unsigned(cls) -> Self:
        return cls("CLA has not been signed. Please make sure the PR author has signed the CLA.")

    @classmethod
    def failing_ci_jobs(cls) -> Self:
        return cls("Failing CI jobs.", non_fatal=True)

    @classmethod
    def pending_ci_jobs(cls) -> Self:
        return cls("Pending CI jobs.", non_fatal=True)

    @classmethod
    def not_merge_ready(cls) -> Self:
        return cls("Not marked as merge ready.")

    @classmethod
    def is_draft(cls) -> Self:
        return cls("Pull request is still in draft.")

    @classmethod
    def is_closed(cls) -> Self:
        return cls("Pull request is already closed.")

    @classmethod
    def is_merged(cls) -> Self:
        return cls("Pull request is already merged.")

    @classmethod
    def mismatching_target_branch(cls, allowed_branches: list[str]) -> Self:
        return cls(
            "Pull request is set to wrong base branch. Please update the PR in the Github UI "
            f"to one of the following branches: {', '.join(allowed_branches)}."
        )

    @classmethod
    def unsatisfied_base_sha(cls) -> Self:
        return cls("Pull request has not been rebased recently and could be bypassing CI checks. Please rebase the PR.")

    @classmethod
    def merge_conflicts(cls, failed_branches: list[str]) -> Self:
        return cls(
            "Could not merge pull request into the following branches due to merge "
            f"conflicts: {', '.join(failed_branches)}. Please rebase the PR or update the target label."
        )

    @classmethod
    def unknown_merge_error(cls) -> Self:
        return cls("Unknown merge error occurred. Please see console output above for debugging.")

    @classmethod
    def unable_to_fixup_commit_message_squash_only(cls) -> Self:
        return cls("Unable to fixup commit message of pull request. Commit message can only be modified if the PR is merged using squash.")

    @classmethod
    def not_found(cls) -> Self:
        return cls("Pull request could not be found upstream.")

    @classmethod
    def insufficient_permissions_to_merge(
        cls,
        message: str = "Insufficient Github API permissions to merge pull request. Please ensure that your auth token has write access.",
    ) -> Self:
        return cls(message)

    @classmethod
    def has_breaking_changes(cls, label_name: str) -> Self:
        return cls(
            f'Cannot merge into branch for "{label_name}" as the pull request has '
            'breaking changes. Breaking changes can only be merged with the "target: major" label.'
        )

    @classmethod
    def has_deprecations(cls, label_name: str) -> Self:
        return cls(
            f'Cannot merge into branch for "{label_name}" as the pull request '
            'contains deprecations. Deprecations can only be merged with the "target: minor" or '
            '"target: major" label.'
        )

    @classmethod
    def has_feature_commits(cls, label_name: str) -> Self:
        return cls(
            f'Cannot merge into branch for "{label_name}" as the pull request has '
            'commits with the "feat" type. New features can only be merged with the "target: minor" '
            'or "target: major" label.'
        )

    @classmethod
    def missing_breaking_change_label(cls, breaking_change_label: str) -> Self:
        return cls(
            "Pull Request has at least one commit containing a breaking change note, "
            "but does not have a breaking change label. Make sure to apply the "
            f"following label: {breaking_change_label}"
        )

    @classmethod
    def missing_breaking_change_commit(cls) -> Self:
        return cls(
            "Pull Request has a breaking change label, but does not contain any commits with "
            "breaking change notes (i.e. commits do not have a `BREAKING CHANGE: <..>` section)."
        )
