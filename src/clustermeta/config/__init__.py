"""Configuration management module.

This module provides:
- Environment-based configuration with validation
- Cached settings access via get_settings()
"""

from .settings import (
    DiscoverySettings,
    Environment,
    InventorySettings,
    LogFormat,
    LogLevel,
    RedisSettings,
    Settings,
    StorageBackendType,
    StorageSettings,
    get_settings,
)

__all__ = [
    # Main settings
    "Settings",
    "get_settings",
    # Enums
    "Environment",
    "LogLevel",
    "LogFormat",
    "StorageBackendType",
    # Component settings
    "StorageSettings",
    "RedisSettings",
    "InventorySettings",
    "DiscoverySettings",
]
