"""Settings and configuration access.

Settings are automatically loaded from .env file via pydantic-settings.

Usage:
    >>> from aws_vpc_cdk.settings import get_settings
    >>> settings = get_settings()
    >>> print(settings.deploy_environment)
    DEV

    In tests, call get_settings.cache_clear() after changing environment
    variables to force a reload.
"""

from functools import lru_cache

from .config import Settings


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Priority order (highest to lowest):
        1. Environment variables
        2. .env file in project root
        3. Default values from config.py

    Returns:
        Settings: Cached settings instance with validated configuration
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
