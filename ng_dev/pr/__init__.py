"""Pull request tooling: checkout, rebase, merge and target branch checks."""
