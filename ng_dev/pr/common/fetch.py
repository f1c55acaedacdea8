"""Fetches pull requests through the GitHub GraphQL API."""

from datetime import datetime
from typing import Literal

import structlog
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ng_dev.github.abc import GitHubClientBase
from ng_dev.github.exceptions import GithubApiRequestError

logger = structlog.get_logger(__name__)

PullRequestState = Literal["OPEN", "MERGED", "CLOSED"]
CommitStatusState = Literal["ERROR", "EXPECTED", "FAILURE", "PENDING", "SUCCESS"]


class GraphqlModel(BaseModel):
    """Base model reading the camel-cased fields of GraphQL responses."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RepositoryRef(GraphqlModel):
    """Pydantic model for the repository of a pull request ref."""

    url: str
    name_with_owner: str


class PullRequestRef(GraphqlModel):
    """Pydantic model for the head or base ref of a pull request."""

    name: str
    repository: RepositoryRef


class CommitStatus(GraphqlModel):
    """Pydantic model for the combined status of a commit."""

    state: CommitStatusState


class PullRequestCommit(GraphqlModel):
    """Pydantic model for a commit of a pull request."""

    oid: str = ""
    message: str
    status: CommitStatus | None = None


class PullRequestCommitNode(GraphqlModel):
    commit: PullRequestCommit


class PullRequestCommits(GraphqlModel):
    total_count: int
    nodes: list[PullRequestCommitNode]


class LabelNode(GraphqlModel):
    name: str


class PullRequestLabels(GraphqlModel):
    nodes: list[LabelNode]


class PullRequestFromGithub(GraphqlModel):
    """Pydantic model for a pull request fetched from GitHub."""

    url: str
    number: int
    title: str
    state: PullRequestState
    is_draft: bool = False
    mergeable: str = "UNKNOWN"
    updated_at: datetime | None = None
    maintainer_can_modify: bool = False
    viewer_did_author: bool = False
    head_ref_oid: str = ""
    head_ref_name: str = ""
    base_ref_name: str
    head_ref: PullRequestRef | None = None
    base_ref: PullRequestRef | None = None
    commits: PullRequestCommits
    labels: PullRequestLabels

    @property
    def label_names(self) -> list[str]:
        """Names of all labels applied to the pull request."""
        return [label.name for label in self.labels.nodes]

    @property
    def commit_messages(self) -> list[str]:
        """Messages of the commits in the pull request, oldest first."""
        return [node.commit.message for node in self.commits.nodes]

    @property
    def combined_status(self) -> CommitStatusState:
        """The combined CI status of the most recent commit in the pull request."""
        if not self.commits.nodes or self.commits.nodes[-1].commit.status is None:
            return "PENDING"
        return self.commits.nodes[-1].commit.status.state


class PendingPullRequest(GraphqlModel):
    """Pydantic model for an open pull request, as listed when scanning for conflicts."""

    number: int
    title: str
    mergeable: str = "UNKNOWN"
    updated_at: datetime
    head_ref: PullRequestRef | None = None
    base_ref: PullRequestRef | None = None


_REF_FIELDS = """
    name
    repository {
      url
      nameWithOwner
    }
"""

PULL_REQUEST_QUERY = f"""
query($owner: String!, $name: String!, $number: Int!) {{
  repository(owner: $owner, name: $name) {{
    pullRequest(number: $number) {{
      url
      number
      title
      state
      isDraft
      mergeable
      updatedAt
      maintainerCanModify
      viewerDidAuthor
      headRefOid
      headRefName
      baseRefName
      headRef {{{_REF_FIELDS}}}
      baseRef {{{_REF_FIELDS}}}
      commits(last: 100) {{
        totalCount
        nodes {{
          commit {{
            oid
            message
            status {{
              state
            }}
          }}
        }}
      }}
      labels(first: 100) {{
        nodes {{
          name
        }}
      }}
    }}
  }}
}}
"""
"""Query for a single pull request. Only the last 100 commits are retrieved."""

PENDING_PULL_REQUESTS_QUERY = f"""
query($owner: String!, $name: String!, $after: String) {{
  repository(owner: $owner, name: $name) {{
    pullRequests(first: 100, after: $after, states: OPEN) {{
      pageInfo {{
        hasNextPage
        endCursor
      }}
      nodes {{
        number
        title
        mergeable
        updatedAt
        headRef {{{_REF_FIELDS}}}
        baseRef {{{_REF_FIELDS}}}
      }}
    }}
  }}
}}
"""
"""Query for a page of open pull requests."""


async def fetch_pull_request_from_github(github: GitHubClientBase, pr_number: int) -> PullRequestFromGithub | None:
    """Fetches a pull request from GitHub. Returns None if the pull request does not exist."""
    try:
        data = await github.graphql(PULL_REQUEST_QUERY, {"owner": github.owner, "name": github.repo_name, "number": pr_number})
    except GithubApiRequestError as exc:
        if exc.status_code == 404:
            return None
        raise
    raw_pull_request = data["repository"]["pullRequest"]
    if raw_pull_request is None:
        return None
    return PullRequestFromGithub.model_validate(raw_pull_request)


async def fetch_pending_pull_requests_from_github(github: GitHubClientBase) -> list[PendingPullRequest]:
    """Fetches all open pull requests of the repository, following pagination."""
    pull_requests: list[PendingPullRequest] = []
    cursor: str | None = None
    while True:
        data = await github.graphql(PENDING_PULL_REQUESTS_QUERY, {"owner": github.owner, "name": github.repo_name, "after": cursor})
        connection = data["repository"]["pullRequests"]
        pull_requests.extend(PendingPullRequest.model_validate(node) for node in connection["nodes"])
        if not connection["pageInfo"]["hasNextPage"]:
            break
        cursor = connection["pageInfo"]["endCursor"]
    logger.debug("Fetched pending pull requests", count=len(pull_requests))
    return pull_requests
