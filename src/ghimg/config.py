"""Library configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from GHIMG_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="GHIMG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # GitHub API configuration
    github_token: str | None = None
    github_api_base: str = "https://api.github.com"
    request_timeout_seconds: float = 30.0

    # How long a directory listing is trusted before it is requested again
    listing_ttl_ms: int = 10_000

    # Debug mode
    debug: bool = False

    @property
    def has_token(self) -> bool:
        """Check if requests to GitHub will be authenticated."""
        return bool(self.github_token)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
