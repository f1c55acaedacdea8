"""Shared constants used across ng-dev."""

import re

# GitHub Constants
# ----------------

GITHUB_URL = "https://github.com"
"""Base URL of the GitHub web interface."""

GITHUB_TOKEN_SETTINGS_URL = "https://github.com/settings/tokens"
"""Page listing the personal access tokens of the authenticated user."""

GITHUB_TOKEN_GENERATE_URL = "https://github.com/settings/tokens/new"
"""Page for generating a new personal access token."""

GITHUB_CLOSING_KEYWORD_PATTERN = r"(?:close[sd]?|fix(?:e[sd]?)|resolve[sd]?):? #{id}(?!\d)"
"""Template for a pattern matching a closing reference to an issue; fill ``id`` with format()."""

# Repository Files
# ----------------

NGBOT_CONFIG_PATH = ".github/angular-robot.yml"
"""Location of the NgBot configuration, relative to the repository root."""

PULLAPPROVE_CONFIG_PATH = ".pullapprove.yml"
"""Location of the PullApprove configuration, relative to the repository root."""

CHANGELOG_FILE_PATH = "CHANGELOG.md"
"""Location of the changelog, relative to the repository root."""

CHANGELOG_SPLIT_MARKER = "<!-- CHANGELOG SPLIT MARKER -->"
"""Marker separating entries in the changelog."""

# Pull Request Merging
# --------------------

TEMP_PR_HEAD_BRANCH = "merge_pr_head"
"""Name of the local branch holding the fetched pull request head while merging."""

PR_CLOSE_TRAILER_PATTERN = re.compile(r"^PR Close #(\d+)$", re.MULTILINE)
"""Pattern to match the trailer appended to the messages of merged commits."""

WAIT_FOR_MERGE_INTERVAL_SECONDS = 10
"""Interval between polls while waiting for a pull request to be merged."""

WAIT_FOR_MERGE_MAX_ATTEMPTS = 360
"""Maximum number of polls while waiting for a pull request to be merged (one hour)."""
