"""Release notes generation for changelog entries and GitHub releases."""
