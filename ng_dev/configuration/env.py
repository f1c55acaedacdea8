"""Pydantic Settings model for environment configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment variable settings for ng-dev."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Generic application-wide settings
    CI: bool = False
    NG_DEV_LOG_LEVEL: str = "WARNING"

    # GitHub API settings
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_TOKEN: str | None = None

    # NPM registry settings
    NPM_REGISTRY_URL: str = "https://registry.npmjs.org"


def get_settings() -> Settings:
    """Reads the settings from the current environment."""
    return Settings()
