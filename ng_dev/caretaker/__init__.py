"""Caretaker tooling."""
