"""Prompts shown to the caretaker while merging a pull request."""

from ng_dev.pr.merge.pull_request import PullRequest
from ng_dev.utils.console import red


def get_caretaker_note_prompt_message(pull_request: PullRequest) -> str:
    return (
        red("Pull request has a caretaker note applied. Please make sure you read it.")
        + f"\nQuick link to PR: {pull_request.url}\nDo you want to proceed merging?"
    )


def get_targeted_branches_confirmation_prompt_message(pull_request: PullRequest) -> str:
    branches = "".join(f" - {branch}\n" for branch in pull_request.target_branches)
    return f"Pull request #{pull_request.pr_number} will merge into:\n{branches}\nDo you want to proceed merging?"
