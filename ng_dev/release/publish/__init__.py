"""Interactive release tool staging and publishing new versions of the project."""
