"""Modules gathering the status information shown by ``caretaker check``."""
