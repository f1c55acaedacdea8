"""Source formatting tooling."""
