"""Configuration loading for the Satchel cart system.

This module provides centralized configuration management:
- Load settings from environment variables and .env files
- Validate configuration using pydantic
- Provide typed access to all settings
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment.

    Uses pydantic-settings for environment variable handling with
    .env file support via python-dotenv.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Store configuration
    store_backend: Literal["memory", "file", "cookie"] = Field(
        default="memory",
        description="Cart store backend type",
    )
    file_store_path: str = Field(
        default="./data/carts",
        description="Directory for the file store",
    )
    file_store_prefix: str = Field(
        default="cart_",
        description="Filename prefix for cart files",
    )
    file_store_extension: str = Field(
        default=".json",
        description="Filename extension for cart files",
    )
    cookie_prefix: str = Field(
        default="cart_",
        description="Cookie name prefix for the cookie store",
    )
    cookie_max_age_seconds: int = Field(
        default=2592000,
        description="Cookie lifetime in seconds (default 30 days)",
    )
    cookie_secure: bool = Field(
        default=False,
        description="Set the Secure flag on cart cookies",
    )

    # Cart behaviour
    default_cart_id: str = Field(
        default="default",
        description="Cart id used when none is given",
    )
    autosave: bool = Field(
        default=True,
        description="Save the cart after every CLI command that changes it",
    )

    # Run mode
    run_mode: Literal["cli", "http"] = Field(
        default="cli",
        description="Run mode",
    )
    http_host: str = Field(
        default="127.0.0.1",
        description="Host to listen on in http mode",
    )
    http_port: int = Field(
        default=8080,
        description="Port to listen on in http mode",
    )

    # Logging configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    # Development
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging",
    )

    @field_validator("default_cart_id", "file_store_prefix", "cookie_prefix")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Ensure identifiers and prefixes are not blank."""
        if not v or not v.strip():
            raise ValueError("value must be a non-empty string")
        return v

    @field_validator("cookie_max_age_seconds")
    @classmethod
    def validate_cookie_max_age(cls, v: int) -> int:
        """Ensure cookie lifetime is positive."""
        if v <= 0:
            raise ValueError("cookie_max_age_seconds must be positive")
        return v

    @field_validator("http_port")
    @classmethod
    def validate_http_port(cls, v: int) -> int:
        """Ensure HTTP port is in valid range (0 picks a free port)."""
        if v < 0 or v > 65535:
            raise ValueError("http_port must be between 0 and 65535")
        return v


def load_settings(env_file: str | None = None) -> Settings:
    """Load application settings from environment.

    Args:
        env_file: Optional path to .env file. If not provided,
                 uses the default .env in the current directory.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If settings validation fails.
    """
    if env_file:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    return Settings()


__all__ = ["Settings", "load_settings"]
