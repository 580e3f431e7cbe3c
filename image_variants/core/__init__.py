"""Core module for configuration, logging and metrics."""

from image_variants.core.config import (
    ConfigurationError,
    Settings,
    StorageConfig,
    get_settings,
    get_storage_config,
    settings,
)

__all__ = [
    "ConfigurationError",
    "Settings",
    "StorageConfig",
    "get_settings",
    "get_storage_config",
    "settings",
]
