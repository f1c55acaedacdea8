"""PullApprove configuration verification."""
