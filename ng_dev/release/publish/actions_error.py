"""Errors aborting a release action."""


class UserAbortedReleaseActionError(Exception):
    """Raised when the caretaker manually aborted a release action."""

    pass


class FatalReleaseActionError(Exception):
    """Raised when a release action failed. Details have already been printed."""

    pass
