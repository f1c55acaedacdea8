"""Contains exceptions raised when loading and validating ng-dev configuration."""


class ConfigValidationError(Exception):
    """Raised when the ng-dev configuration is missing or contains invalid values."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        """Initializes the exception with a summary message and the individual errors."""
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class ConfigFileNotFoundError(ConfigValidationError):
    """Raised when no ng-dev configuration file exists in the repository."""

    pass
