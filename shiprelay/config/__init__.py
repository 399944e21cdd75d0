"""
Configuration module for the ShipRelay server.

This module provides type-safe, validated configuration using Pydantic BaseSettings.

Usage:
    from shiprelay.config import get_config

    config = get_config()
    logger.info("Configuration loaded", host=config.server.host, port=config.server.port)
"""

import sys
import threading
from functools import lru_cache
from os import getenv

from .models import AppConfig, LoggingConfig, RelayConfig, ServerConfig

__all__ = ["get_config", "reset_config", "AppConfig", "LoggingConfig", "RelayConfig", "ServerConfig"]

# Module-level config cache
_config_instance = None
_config_lock = threading.Lock()


def _is_test_mode() -> bool:
    """
    Detect if running in test environment.

    Returns:
        bool: True if pytest is loaded or pytest environment variables are set
    """
    if "pytest" in sys.modules:
        return True

    if getenv("PYTEST_CURRENT_TEST"):
        return True

    return False


@lru_cache(maxsize=1)
def _get_config_cached() -> AppConfig:
    """Production config loader with caching."""
    global _config_instance
    with _config_lock:
        if _config_instance is None:
            _config_instance = AppConfig()
    return _config_instance


def get_config() -> AppConfig:
    """
    Get application configuration (singleton in production, fresh in tests).

    Configuration is loaded from environment variables and the .env file.

    Returns:
        AppConfig: The application configuration

    Raises:
        ValidationError: If configuration is invalid
    """
    if _is_test_mode():
        return AppConfig()
    return _get_config_cached()


def reset_config() -> None:
    """
    Reset the configuration cache.

    Primarily used by tests to force a configuration reload.
    """
    global _config_instance  # pylint: disable=global-statement
    with _config_lock:
        _get_config_cached.cache_clear()
        _config_instance = None
