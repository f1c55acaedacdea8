"""Glob matching for repository-relative paths.

Supports ``*`` and ``?`` within a path segment, ``**`` across segments, character
classes and brace alternatives (``*.{ts,js}``). Dot files are matched like any other file.
"""

import functools
import re
from typing import Pattern

_BRACE_PATTERN = re.compile(r"\{([^{}]*)\}")


def expand_braces(pattern: str) -> list[str]:
    """Expands brace alternatives, e.g. ``**/*.{t,j}s`` into ``**/*.ts`` and ``**/*.js``."""
    match = _BRACE_PATTERN.search(pattern)
    if match is None:
        return [pattern]
    expanded: list[str] = []
    for alternative in match.group(1).split(","):
        expanded.extend(expand_braces(pattern[: match.start()] + alternative + pattern[match.end() :]))
    return expanded


def _translate(pattern: str) -> str:
    parts: list[str] = []
    index = 0
    while index < len(pattern):
        if pattern.startswith("**/", index):
            parts.append("(?:.*/)?")
            index += 3
        elif pattern.startswith("**", index):
            parts.append(".*")
            index += 2
        elif pattern[index] == "*":
            parts.append("[^/]*")
            index += 1
        elif pattern[index] == "?":
            parts.append("[^/]")
            index += 1
        elif pattern[index] == "[" and "]" in pattern[index + 2 :]:
            end = pattern.index("]", index + 2)
            content = pattern[index + 1 : end]
            if content.startswith("!"):
                content = "^" + content[1:]
            parts.append(f"[{content}]")
            index = end + 1
        else:
            parts.append(re.escape(pattern[index]))
            index += 1
    return "".join(parts)


@functools.lru_cache(maxsize=None)
def get_or_create_glob(pattern: str) -> Pattern[str]:
    """Compiles a glob pattern, caching the result as patterns are matched against every file."""
    return re.compile("^(?:" + "|".join(_translate(expanded) for expanded in expand_braces(pattern)) + ")$")


def matches_glob(file: str, pattern: str) -> bool:
    """Whether a repository-relative path matches the glob pattern."""
    return get_or_create_glob(pattern).match(file) is not None


def matches_include_and_exclude(file: str, includes: list[str], excludes: list[str]) -> bool:
    """Whether the file matches an include pattern and none of the exclude patterns."""
    return any(matches_glob(file, pattern) for pattern in includes) and not any(
        matches_glob(file, pattern) for pattern in excludes
    )
