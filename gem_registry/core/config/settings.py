"""
Application Settings

Configuration classes using Pydantic for validation.
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_SERVER_URL = "https://rubygems.org"


class RegistryConfig(BaseSettings):
    """Registry connection settings."""

    model_config = SettingsConfigDict(
        env_prefix="RUBYGEMS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    server_url: str = Field(
        default=DEFAULT_SERVER_URL,
        description="Registry base URL"
    )
    mirror: Optional[str] = Field(
        default=None,
        description="Named mirror; overrides server_url when set"
    )
    proxy: Optional[str] = Field(
        default=None,
        description="Proxy URL for outgoing requests"
    )
    token: Optional[str] = Field(
        default=None,
        description="API token sent as a bearer Authorization header"
    )
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="Request timeout in seconds"
    )

    @field_validator("server_url")
    @classmethod
    def validate_server_url(cls, v: str) -> str:
        """Require an http(s) URL without trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Invalid server URL: {v}")
        return v.rstrip("/")


class RetryConfig(BaseSettings):
    """Retry policy settings."""

    model_config = SettingsConfigDict(
        env_prefix="RUBYGEMS_RETRY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    enabled: bool = Field(default=True, description="Retry transient failures")
    max_attempts: int = Field(default=3, ge=1, description="Attempts including the first")
    initial_wait: float = Field(default=1.0, ge=0, description="Wait before the 2nd attempt (seconds)")
    max_wait: float = Field(default=30.0, ge=0, description="Upper bound of any wait (seconds)")
    exponential_backoff: bool = Field(default=True, description="Double the wait on each retry")


class CacheConfig(BaseSettings):
    """Cache settings."""

    model_config = SettingsConfigDict(
        env_prefix="RUBYGEMS_CACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    enabled: bool = Field(default=True, description="Wrap the client with the cache")
    ttl: float = Field(default=600.0, gt=0, description="Base TTL in seconds")
    sweep_interval: float = Field(
        default=3600.0,
        description="Seconds between expiry sweeps; <= 0 disables the sweep"
    )


class BulkConfig(BaseSettings):
    """Bulk fetch settings."""

    model_config = SettingsConfigDict(
        env_prefix="RUBYGEMS_BULK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    max_concurrency: int = Field(default=10, description="Concurrent workers")
    continue_on_error: bool = Field(default=True, description="Keep dispatching after a failure")

    @field_validator("max_concurrency")
    @classmethod
    def clamp_concurrency(cls, v: int) -> int:
        """Never configure zero workers."""
        return max(1, v)


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="GEM_REGISTRY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="WARNING", description="Root log level")

    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    bulk: BulkConfig = Field(default_factory=BulkConfig)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level
