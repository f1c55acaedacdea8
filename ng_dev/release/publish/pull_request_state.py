"""Determines whether a pull request created by the release tool has been merged."""

import re
from datetime import datetime, timedelta, timezone
from typing import Literal

from ng_dev.github.abc import GitHubClientBase
from ng_dev.utils.constants import GITHUB_CLOSING_KEYWORD_PATTERN

PullRequestState = Literal["merged", "closed", "open"]

CLOSED_STATE_GRACE_PERIOD = timedelta(seconds=30)
"""Time GitHub gets to associate a closed pull request with the commit that closed it."""


async def get_pull_request_state(github: GitHubClientBase, pr_number: int) -> PullRequestState:
    """Gets whether the pull request is open, merged or closed without being merged.

    Pull requests merged with the autosquash strategy are closed by a commit rather than
    merged, so closed pull requests count as merged when a commit closed them.
    """
    pull_request = await github.get_pull_request(pr_number)
    if pull_request.merged:
        return "merged"
    closed_at = pull_request.closed_at
    if closed_at is not None and closed_at < datetime.now(timezone.utc) - CLOSED_STATE_GRACE_PERIOD:
        return "merged" if await is_pull_request_closed_with_associated_commit(github, pr_number) else "closed"
    return "open"


async def is_pull_request_closed_with_associated_commit(github: GitHubClientBase, pr_number: int) -> bool:
    """Whether the most recent closing of the pull request was caused by a commit."""
    events = await github.list_issue_events(pr_number)
    for event in reversed(events):
        # Commits that closed the pull request before it was reopened are not relevant.
        if event.event == "reopened":
            return False
        if event.event == "closed" and event.commit_id:
            return True
        # Pushes to non-default branches reference the pull request without closing it.
        if event.event == "referenced" and event.commit_id and await is_commit_closing_pull_request(github, event.commit_id, pr_number):
            return True
    return False


async def is_commit_closing_pull_request(github: GitHubClientBase, sha: str, pr_number: int) -> bool:
    """Whether the message of the commit contains a closing keyword for the pull request."""
    message = await github.get_commit_message(sha)
    return re.search(GITHUB_CLOSING_KEYWORD_PATTERN.format(id=pr_number), message, re.IGNORECASE) is not None
