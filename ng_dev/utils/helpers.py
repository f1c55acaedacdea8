"""Contains generic helper functions used throughout ng-dev."""

import re
from typing import Pattern


def to_pattern(value: str | Pattern[str]) -> str | Pattern[str]:
    """Converts a configured label value into a pattern.

    Values wrapped in slashes (``/^target: /``) become regular expressions, any
    other string is matched literally.
    """
    if isinstance(value, str) and len(value) > 1 and value.startswith("/") and value.endswith("/"):
        return re.compile(value[1:-1])
    return value


def matches_pattern(value: str, pattern: str | Pattern[str]) -> bool:
    """Whether the value matches the pattern, either literally or as a regular expression."""
    if isinstance(pattern, str):
        return value == pattern
    return pattern.search(value) is not None


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """Returns the singular or plural form depending on the count."""
    if count == 1:
        return singular
    return plural if plural is not None else f"{singular}s"


def has_matching_label(labels: list[str], configured_label: str | None) -> bool:
    """Whether any of the labels matches a configured label value."""
    if not configured_label:
        return False
    pattern = to_pattern(configured_label)
    return any(matches_pattern(label, pattern) for label in labels)
