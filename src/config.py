"""
Application Configuration Module.

Manages application settings and environment variables using Pydantic for validation.
Provides centralized configuration management with type safety and validation.

Features:
- Environment variable loading and validation
- Secure credential management
- Upstream pacing and cache tuning
- Path normalization for the log directory
"""

from typing import Optional
import os

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from logger import LogManager


class Settings(BaseSettings):
    """
    Application configuration settings with validation.

    Manages and validates all application settings including:
    - Application identification
    - GitHub authentication and API location
    - Upstream request pacing
    - Cache lifetime
    - Logging settings
    - HTTP server binding

    Attributes:
        app_name (str): Name of the application
        dev (bool): Debug mode flag
        log_dir (str): Directory for log files
        log_level (int): Logging level (default: info)
        github_token (Optional[SecretStr]): GitHub API token, anonymous when unset
        github_username (Optional[str]): Default user to aggregate
        github_api_url (str): Base URL of the GitHub REST API
        request_timeout_seconds (int): Per-request upstream timeout
        per_page (int): Page size for paginated endpoints
        search_result_limit (int): Search API result ceiling
        search_page_delay_seconds (float): Pause between search pages
        detail_fetch_delay_seconds (float): Pause between PR detail fetches
        cache_ttl_seconds (float): Lifetime of cached upstream collections
        activity_weeks (int): Weeks covered by the activity timeline
        host (str): HTTP bind address
        port (int): HTTP bind port
    """

    # Application settings
    app_name: str = Field(default="PRPulse", description="Application name")
    dev: bool = Field(default=False, description="Debug mode")
    log_dir: str = Field(default="logs", description="Logging directory")
    log_level: int = Field(default=20, description="Logging level, default info")

    # GitHub configuration
    github_token: Optional[SecretStr] = Field(
        default=None, description="GitHub token, anonymous access when unset"
    )
    github_username: Optional[str] = Field(
        default=None, description="Default GitHub user to aggregate"
    )
    github_api_url: str = Field(
        default="https://api.github.com", description="GitHub REST API base URL"
    )
    request_timeout_seconds: int = Field(
        default=30, gt=0, description="Per-request upstream timeout in seconds"
    )

    # Collection configuration
    per_page: int = Field(default=100, ge=1, le=100, description="Page size")
    search_result_limit: int = Field(
        default=1000, ge=1, description="Search API result ceiling"
    )
    search_page_delay_seconds: float = Field(
        default=0.1, ge=0, description="Delay between search result pages"
    )
    detail_fetch_delay_seconds: float = Field(
        default=0.05, ge=0, description="Delay between pull request detail fetches"
    )

    # Cache configuration
    cache_ttl_seconds: float = Field(
        default=300.0, gt=0, description="Cache entry time-to-live in seconds"
    )

    activity_weeks: int = Field(
        default=12, ge=1, description="Weeks covered by the activity timeline"
    )

    # HTTP server
    host: str = Field(default="127.0.0.1", description="HTTP bind address")
    port: int = Field(default=5000, description="HTTP bind port")

    @property
    def token(self) -> Optional[str]:
        """
        Get the raw GitHub token.

        Returns:
            Optional[str]: Token value, or None for anonymous access
        """
        if self.github_token is None:
            return None
        return self.github_token.get_secret_value() or None

    @field_validator("log_dir")
    def ensure_absolute_path(cls, v: str) -> str:
        """
        Ensure log directory path is absolute.

        Converts relative paths to absolute paths based on current working directory.

        Args:
            v (str): Directory path to validate

        Returns:
            str: Absolute path to log directory
        """
        if not os.path.isabs(v):
            return os.path.abspath(v)
        return v

    # Configure env file loading
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields in .env file
    )


# Create global settings instance
settings = Settings()

# Initialize logging configuration
logger = LogManager(
    app_name=settings.app_name.lower(),
    log_dir=settings.log_dir,
    development=settings.dev,
    level=settings.log_level,
).logger
