"""Application configuration loaded from environment variables.

All configuration is via environment variables (or a local .env file).
No hardcoded site URLs or credentials: WordPress credentials arrive per
request, only client behavior is configured here.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="WordPress Taxonomy Service")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")

    # Server
    port: int = Field(default=8000, description="Port to bind to")
    host: str = Field(default="0.0.0.0", description="Host to bind to")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="json", description="Log format: json or text")

    # WordPress REST API
    wordpress_timeout: float = Field(
        default=10.0, description="WordPress request timeout in seconds"
    )
    wordpress_per_page: int = Field(
        default=100,
        ge=1,
        le=100,
        description="Taxonomy listing page size (WP maximum is 100)",
    )
    wordpress_page_delay: float = Field(
        default=0.2, description="Delay between successive listing pages in seconds"
    )
    wordpress_max_retries: int = Field(
        default=3, description="Maximum retry attempts on 429 responses"
    )
    wordpress_retry_delay: float = Field(
        default=2.0, description="Base delay between retries in seconds"
    )
    wordpress_tag_name_max_length: int = Field(
        default=200, description="Longest tag name that will be created"
    )

    # Taxonomy resolution
    taxonomy_cache_ttl: float = Field(
        default=300.0,
        description="Seconds a fetched site taxonomy stays cached (0 disables)",
    )
    taxonomy_prompt_category_limit: int = Field(
        default=20, description="Existing categories offered to the metadata prompt"
    )
    taxonomy_prompt_tag_limit: int = Field(
        default=50, description="Existing tags offered to the metadata prompt"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
