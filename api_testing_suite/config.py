"""
Application settings for the API Testing Suite.

Values are read from environment variables prefixed with ``API_SUITE_``
(or a local ``.env`` file) and validated by pydantic-settings.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for the API service and the mock server."""

    model_config = SettingsConfigDict(
        env_prefix="API_SUITE_",
        env_file=".env",
        extra="ignore",
    )

    app_name: str = "API Testing Suite"

    # Persistence
    database_url: str = "sqlite:///./api_testing_suite.db"
    content_dir: str = "./content"
    schemas_dir: str = "./schemas"

    # Mock server
    mock_host: str = "127.0.0.1"
    mock_port: int = 3001

    # Test execution
    default_timeout_ms: int = 30000

    # Logging
    log_level: str = "INFO"

    cors_origins: list[str] = ["*"]


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
