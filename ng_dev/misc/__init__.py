"""Miscellaneous developer tooling."""
