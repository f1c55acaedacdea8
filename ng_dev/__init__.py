"""Developer operations tooling for caretaking, commit linting, pull request merging and releasing."""
