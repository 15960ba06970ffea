"""Configuration of the settings store itself.

Responsibilities:
- Singleton settings manager for global configuration access
- Settings loading from environment variables
- Thread-safe configuration management
"""

from .settings_manager import (
    ApplicationSettings,
    StorageSettings,
    DatabaseSettings,
    Environment,
    SettingsManager,
    get_settings,
    mask_connection_string,
)

__all__ = [
    "SettingsManager",
    "ApplicationSettings",
    "StorageSettings",
    "DatabaseSettings",
    "Environment",
    "get_settings",
    "mask_connection_string",
]
