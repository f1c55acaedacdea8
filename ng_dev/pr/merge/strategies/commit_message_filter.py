"""Message filter for ``git filter-branch`` referencing the merged pull request.

Invoked as ``python -m ng_dev.pr.merge.strategies.commit_message_filter <pr-number>``
with the original commit message on stdin.
"""

import sys

from ng_dev.utils.constants import PR_CLOSE_TRAILER_PATTERN


def rewrite_commit_message(message: str, pr_number: int) -> str:
    """Adds the pull request number to the header and a ``PR Close`` trailer to the message.

    This matches what GitHub does when squash merging through the web UI, so the pull request
    of a commit can be found from its message and GitHub closes the pull request on push.
    """
    if any(int(match) == pr_number for match in PR_CLOSE_TRAILER_PATTERN.findall(message)):
        return message
    lines = message.rstrip("\n").split("\n")
    lines[0] += f" (#{pr_number})"
    lines.extend(["", f"PR Close #{pr_number}"])
    return "\n".join(lines) + "\n"


def main(argv: list[str]) -> None:
    """Rewrites the commit message read from stdin for the pull request given in argv."""
    sys.stdout.write(rewrite_commit_message(sys.stdin.read(), int(argv[1])))


if __name__ == "__main__":
    main(sys.argv)
