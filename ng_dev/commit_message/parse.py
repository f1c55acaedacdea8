"""Parses commit messages following the conventional commit format."""

import re
from dataclasses import dataclass, field

from ng_dev.utils.git_client import GitClient

FIXUP_PREFIX_PATTERN = re.compile(r"^fixup! ", re.IGNORECASE)
"""Pattern determining if a commit is a fixup."""

SQUASH_PREFIX_PATTERN = re.compile(r"^squash! ", re.IGNORECASE)
"""Pattern determining if a commit is a squash."""

REVERT_PREFIX_PATTERN = re.compile(r"^revert:? ", re.IGNORECASE)
"""Pattern determining if a commit is a revert."""

HEADER_PATTERN = re.compile(r"^(\w+)(?:\(([^)]+)\))?:\s(.+)$")
"""Pattern splitting a header into type, scope and summary."""

GITHUB_LINKING_PATTERN = re.compile(r"((closed?s?)|(fix(es)?(ed)?)|(resolved?s?))\s#(\d+)", re.IGNORECASE)
"""Pattern finding GitHub keyword links to issues."""

NOTE_PATTERN = re.compile(r"^(BREAKING CHANGE|DEPRECATED):\s?(.*)$")
"""Pattern matching the first line of a breaking change or deprecation note."""

SCISSORS_LINE = "# ------------------------ >8 ------------------------"
"""Marker below which git discards the commit message template in verbose mode."""

GIT_LOG_SEPARATOR = "------------------------ >8 ng-dev commit >8 ------------------------"
"""Separator placed after every commit in git log output parsed by parse_commit_from_git_log."""

GIT_LOG_FORMAT_FOR_PARSING = f"%H%n%an%n%B{GIT_LOG_SEPARATOR}"
"""Format passed to ``git log --format`` to retrieve commits for parsing."""


@dataclass(frozen=True)
class CommitNote:
    """A breaking change or deprecation note of a commit."""

    title: str
    text: str


@dataclass(frozen=True)
class Commit:
    """A parsed commit message."""

    full_text: str
    header: str
    body: str
    body_without_linking: str
    footer: str
    type: str
    scope: str
    summary: str
    breaking_changes: list[CommitNote] = field(default_factory=list)
    deprecations: list[CommitNote] = field(default_factory=list)
    is_fixup: bool = False
    is_squash: bool = False
    is_revert: bool = False
    sha: str = ""
    author: str = ""

    @property
    def short_sha(self) -> str:
        """The abbreviated commit SHA."""
        return self.sha[:7]


def _strip_comments(message: str) -> str:
    if SCISSORS_LINE in message:
        message = message[: message.index(SCISSORS_LINE)]
    return "\n".join(line for line in message.split("\n") if not line.startswith("#"))


def _split_body_and_notes(content: str) -> tuple[str, str, list[CommitNote]]:
    """Splits the content after the header into the body, the footer and its notes."""
    body_lines: list[str] = []
    footer_lines: list[str] = []
    notes: list[tuple[str, list[str]]] = []
    for line in content.split("\n"):
        match = NOTE_PATTERN.match(line)
        if match:
            notes.append((match.group(1), [match.group(2)]))
            footer_lines.append(line)
        elif notes:
            notes[-1][1].append(line)
            footer_lines.append(line)
        else:
            body_lines.append(line)
    parsed_notes = [CommitNote(title, "\n".join(lines).strip()) for title, lines in notes]
    return "\n".join(body_lines), "\n".join(footer_lines), parsed_notes


def parse_commit_message(message: str, sha: str = "", author: str = "") -> Commit:
    """Parses a full commit message into its composite parts."""
    full_text = _strip_comments(message).strip("\n")
    header_line = full_text.split("\n", 1)[0]
    header = SQUASH_PREFIX_PATTERN.sub("", FIXUP_PREFIX_PATTERN.sub("", header_line))

    content = full_text.split("\n\n", 1)[1] if "\n\n" in full_text else ""
    body, footer, notes = _split_body_and_notes(content)

    commit_type, scope, summary = "", "", ""
    header_match = HEADER_PATTERN.match(header)
    if header_match:
        commit_type, scope, summary = header_match.group(1), header_match.group(2) or "", header_match.group(3)

    return Commit(
        full_text=full_text,
        header=header,
        body=body,
        body_without_linking=GITHUB_LINKING_PATTERN.sub("", body),
        footer=footer,
        type=commit_type,
        scope=scope,
        summary=summary,
        breaking_changes=[note for note in notes if note.title == "BREAKING CHANGE"],
        deprecations=[note for note in notes if note.title == "DEPRECATED"],
        is_fixup=FIXUP_PREFIX_PATTERN.match(full_text) is not None,
        is_squash=SQUASH_PREFIX_PATTERN.match(full_text) is not None,
        is_revert=REVERT_PREFIX_PATTERN.match(full_text) is not None,
        sha=sha,
        author=author,
    )


def parse_commit_from_git_log(raw_commit: str) -> Commit:
    """Parses a commit printed with GIT_LOG_FORMAT_FOR_PARSING, without its separator."""
    sha, author, message = (raw_commit.strip("\n").split("\n", 2) + ["", ""])[:3]
    return parse_commit_message(message, sha=sha, author=author)


def get_commits_in_range(git: GitClient, from_ref: str, to_ref: str = "HEAD") -> list[Commit]:
    """Finds all commits within the range, most recent first."""
    output = git.run(["log", f"--format={GIT_LOG_FORMAT_FOR_PARSING}", f"{from_ref}..{to_ref}"]).stdout
    return [parse_commit_from_git_log(raw) for raw in output.split(GIT_LOG_SEPARATOR) if raw.strip()]
