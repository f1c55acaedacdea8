"""Pydantic models for the sections of the ng-dev configuration file."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MergeMethod(str, Enum):
    """Merge methods supported by the GitHub pull request merge API."""

    MERGE = "merge"
    SQUASH = "squash"
    REBASE = "rebase"


class GithubConfig(BaseModel):
    """Describes the upstream GitHub repository of the project."""

    owner: str = ""
    name: str = ""
    main_branch_name: str = "main"
    use_ssh: bool = False
    private: bool = False


class GithubQueryConfig(BaseModel):
    """A named GitHub search query displayed by the caretaker check."""

    name: str
    query: str


class CaretakerConfig(BaseModel):
    """Configuration for the caretaker commands."""

    github_queries: list[GithubQueryConfig] = Field(default_factory=list)


class CommitMessageConfig(BaseModel):
    """Configuration for commit message validation."""

    max_line_length: int = 120
    min_body_length: int = 20
    min_body_length_type_excludes: list[str] = Field(default_factory=list)
    scopes: list[str] = Field(default_factory=list)


class GithubApiMergeLabelConfig(BaseModel):
    """Maps a label pattern to the merge method used when the label is applied."""

    pattern: str
    method: MergeMethod


class GithubApiMergeConfig(BaseModel):
    """Configuration for merging pull requests through the GitHub API."""

    default: MergeMethod = MergeMethod.SQUASH
    labels: list[GithubApiMergeLabelConfig] = Field(default_factory=list)


class PullRequestConfig(BaseModel):
    """Configuration for the pull request commands.

    Label values are matched literally unless wrapped in slashes (e.g. ``/^target: /``),
    in which case they are treated as regular expressions.
    """

    remote: GithubConfig | None = None
    no_target_labeling: bool = False
    required_base_commits: dict[str, str] = Field(default_factory=dict)
    merge_ready_label: str = "action: merge"
    cla_signed_label: str = "cla: yes"
    caretaker_note_label: str | None = "action: merge-assistance"
    commit_message_fixup_label: str = "commit message fixup"
    github_api_merge: GithubApiMergeConfig | None = None
    target_label_exempt_scopes: list[str] = Field(default_factory=list)
    breaking_change_label: str = "flag: breaking change"
    deprecation_label: str = "flag: deprecation"


class ReleaseNotesConfig(BaseModel):
    """Configuration for the generated release notes."""

    hidden_scopes: list[str] = Field(default_factory=list)
    group_order: list[str] = Field(default_factory=list)
    use_release_title: bool = False


class ReleaseConfig(BaseModel):
    """Configuration for building and publishing releases."""

    npm_packages: list[str] = Field(default_factory=list)
    build_command: list[str] = Field(default_factory=list)
    release_notes: ReleaseNotesConfig = Field(default_factory=ReleaseNotesConfig)
    release_pr_labels: list[str] = Field(default_factory=list)
    publish_registry: str | None = None


class NgDevConfig(BaseModel):
    """The full ng-dev configuration as read from the repository."""

    model_config = ConfigDict(extra="allow")

    github: GithubConfig | None = None
    caretaker: CaretakerConfig | None = None
    commit_message: CommitMessageConfig | None = None
    format: dict[str, Any] | None = None
    pull_request: PullRequestConfig | None = None
    release: ReleaseConfig | None = None


class CommitMessageUserConfig(BaseModel):
    """Per-user configuration for the commit message tooling."""

    disable_wizard: bool = False
    error_on_invalid_message: bool = False


class NgDevUserConfig(BaseModel):
    """Per-user configuration, read from an untracked file in the repository root."""

    model_config = ConfigDict(extra="allow")

    commit_message: CommitMessageUserConfig = Field(default_factory=CommitMessageUserConfig)
