"""
Configuration Loader

Handles loading and validation of configuration.
"""

import os
import logging
from typing import Optional, Dict, Any

from dotenv import load_dotenv

from .settings import Settings

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Loads and manages application configuration."""

    _instance: Optional['ConfigLoader'] = None
    _settings: Optional[Settings] = None

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @classmethod
    def load_config(
        cls,
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None
    ) -> Settings:
        """
        Load configuration from environment and files.

        Args:
            env_file: Path to .env file
            overrides: Environment variable overrides, e.g.
                {"RUBYGEMS_RETRY_MAX_ATTEMPTS": 5}

        Returns:
            Loaded settings
        """
        if cls._settings is not None:
            return cls._settings

        if env_file:
            load_dotenv(env_file, override=False)

        # Apply overrides to environment
        if overrides:
            for key, value in overrides.items():
                os.environ[key.upper()] = str(value)

        try:
            cls._settings = Settings()

            logger.info(
                f"Configuration loaded successfully "
                f"(debug={cls._settings.debug})"
            )

            cls._log_config_info()

            return cls._settings

        except Exception as e:
            logger.error(f"Failed to load configuration: {e}")
            raise

    @classmethod
    def get_settings(cls) -> Settings:
        """
        Get current settings instance.

        Raises:
            RuntimeError: If config not loaded
        """
        if cls._settings is None:
            raise RuntimeError(
                "Configuration not loaded. Call load_config() first."
            )
        return cls._settings

    @classmethod
    def reload_config(
        cls,
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None
    ) -> Settings:
        """Drop the cached settings and load them again."""
        cls._settings = None
        return cls.load_config(env_file, overrides)

    @classmethod
    def reset(cls) -> None:
        """Forget loaded settings."""
        cls._settings = None

    @classmethod
    def _log_config_info(cls) -> None:
        """Log non-sensitive configuration information."""
        if not cls._settings:
            return

        settings = cls._settings
        logger.info(f"Registry: {settings.registry.mirror or settings.registry.server_url}")
        logger.info(
            f"Retry: enabled={settings.retry.enabled} "
            f"attempts={settings.retry.max_attempts}"
        )
        logger.info(f"Cache: enabled={settings.cache.enabled} ttl={settings.cache.ttl}s")
        logger.info(f"Bulk concurrency: {settings.bulk.max_concurrency}")

    @classmethod
    def validate_config(cls) -> bool:
        """
        Validate current configuration.

        Returns:
            True if config is valid
        """
        if not cls._settings:
            logger.error("No configuration loaded")
            return False

        settings = cls._settings

        if settings.retry.max_wait < settings.retry.initial_wait:
            logger.error(
                f"Retry max_wait ({settings.retry.max_wait}) is below "
                f"initial_wait ({settings.retry.initial_wait})"
            )
            return False

        proxy = settings.registry.proxy
        if proxy and not any(proxy.startswith(prefix) for prefix in [
            "http://", "https://", "socks5://", "socks5h://"
        ]):
            logger.error(f"Invalid proxy URL format: {proxy}")
            return False

        if settings.registry.mirror:
            # infrastructure imports core
            from ...infrastructure.api.rubygems.mirrors import MIRRORS
            if settings.registry.mirror.lower() not in MIRRORS:
                logger.error(f"Unknown mirror: {settings.registry.mirror}")
                return False

        return True


# Convenience function
def get_settings() -> Settings:
    """Get current settings instance."""
    return ConfigLoader.get_settings()
