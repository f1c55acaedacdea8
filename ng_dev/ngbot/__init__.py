"""NgBot configuration tooling."""
