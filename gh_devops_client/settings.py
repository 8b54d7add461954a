"""Application settings loaded from environment variables and .env file."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import DEFAULT_API_URL, Credentials


class Settings(BaseSettings):
    """Settings for the GitHub DevOps client."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    github_token: str | None = None
    github_owner: str = ""
    github_repo: str = ""
    github_api_url: str = DEFAULT_API_URL
    log_level: str = "WARNING"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def get_credentials(settings: Settings | None = None) -> Credentials | None:
    """Resolve credentials from settings.

    Returns None if GITHUB_TOKEN is not set.
    """
    settings = settings or get_settings()
    if not settings.github_token:
        return None
    return Credentials(
        token=settings.github_token,
        owner=settings.github_owner,
        repo=settings.github_repo,
        api_url=settings.github_api_url or DEFAULT_API_URL,
    )


def validate_credentials(credentials: Credentials) -> bool:
    """Check that credentials carry a usable token."""
    return bool(credentials.token and credentials.token.strip())
