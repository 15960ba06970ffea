"""Settings manager for the settings store itself.

This module provides a centralized settings broker that can:
- Load from environment variables
- Be modified at runtime
- Validate settings
- Support different environments (dev, test, prod)

These are the settings of the store (where the database lives, what the
table is called, which files are layered), not the application settings
persisted inside it.
"""

import os
import re
from dataclasses import asdict, dataclass
from enum import Enum
from threading import Lock
from typing import Any, Dict, List, Optional

from loguru import logger


def mask_connection_string(connection_string: str | None) -> str | None:
    """Replace the password of a database URL with a mask."""
    if not connection_string:
        return connection_string
    return re.sub(r"(://[^:/@]+:)[^@]*@", r"\1***MASKED***@", connection_string)


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


@dataclass
class Settings:
    """Base class for settings dataclasses."""

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary."""
        return asdict(self)


@dataclass
class ApplicationSettings(Settings):
    """Application-level settings."""

    name: str = "settings-store"
    environment: Environment = Environment.DEVELOPMENT
    log_level: str = "INFO"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data["environment"] = self.environment.value  # Convert Enum to string
        return data


@dataclass
class StorageSettings(Settings):
    """Storage-related settings."""

    table_name_settings: str = "config_settings"
    base_file_name: str = "appsettings.json"
    environment_file_pattern: str = "appsettings.{environment}.json"
    site_file_name: str = "appsettings.site.json"
    environment_variable_prefix: str = "SETTINGS_STORE_"


@dataclass
class DatabaseSettings(Settings):
    """Database connection settings."""

    connection_string: str = "sqlite:///settings.db3"
    timeout: float = 30.0
    echo: bool = False


class SettingsManager:
    """Centralized settings manager with runtime configuration support.

    Features:
    - Singleton pattern for global access
    - Thread-safe operations
    - Runtime configuration changes
    - Environment variable loading
    - Validation

    Usage:
        # Get instance
        settings = SettingsManager.get_instance()

        # Access settings
        url = settings.database.connection_string

        # Update at runtime
        settings.database.timeout = 5.0
    """

    _instance: Optional["SettingsManager"] = None
    _lock: Lock = Lock()

    def __init__(self):
        """Initialize settings manager.

        Note: Use get_instance() instead of direct instantiation.
        """
        self.application = ApplicationSettings()
        self.storage = StorageSettings()
        self.database = DatabaseSettings()
        self._change_lock = Lock()

    @classmethod
    def get_instance(cls) -> "SettingsManager":
        """Get or create the singleton instance using double-checked locking.

        Returns:
            SettingsManager instance
        """
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
                    cls._instance.load_from_env()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance (mainly for testing)."""
        with cls._lock:
            cls._instance = None

    def load_from_env(self, prefix: str = "") -> None:
        """Load settings from environment variables.

        Args:
            prefix: Optional prefix for environment variables (e.g., "MYAPP_")
        """
        with self._change_lock:

            env_vars = os.environ

            logger.info(
                "Loading settings from environment variables" + (f" with prefix={prefix}" if prefix else "")
            )

            # Application settings
            app_mapping = {
                f"{prefix}APP_NAME": "name",
                f"{prefix}APP_ENVIRONMENT": "environment",
                f"{prefix}APP_LOG_LEVEL": "log_level",
            }

            for env_key, attr_name in app_mapping.items():
                if env_key in env_vars:
                    value = env_vars[env_key]
                    if attr_name == "environment":
                        value = Environment(value.lower())
                    elif attr_name == "log_level":
                        value = value.upper()
                    setattr(self.application, attr_name, value)

            # Storage settings
            storage_mapping = {
                f"{prefix}SETTINGS_TABLE_NAME": "table_name_settings",
                f"{prefix}SETTINGS_BASE_FILE": "base_file_name",
                f"{prefix}SETTINGS_ENVIRONMENT_FILE_PATTERN": "environment_file_pattern",
                f"{prefix}SETTINGS_SITE_FILE": "site_file_name",
                f"{prefix}SETTINGS_ENV_PREFIX": "environment_variable_prefix",
            }

            for env_key, attr_name in storage_mapping.items():
                if env_key in env_vars:
                    setattr(self.storage, attr_name, env_vars[env_key])

            # Database settings
            db_mapping = {
                f"{prefix}SETTINGS_DATABASE_URL": "connection_string",
                f"{prefix}SETTINGS_DATABASE_TIMEOUT": "timeout",
                f"{prefix}SETTINGS_DATABASE_ECHO": "echo",
            }

            for env_key, attr_name in db_mapping.items():
                if env_key in env_vars:
                    value = env_vars[env_key]
                    # Type conversion
                    if attr_name == "timeout":
                        value = float(value)
                    elif attr_name == "echo":
                        value = value.lower() in ["true", "1", "yes"]
                    setattr(self.database, attr_name, value)

            logger.info("Settings successfully loaded from environment")

    def export_settings(self, mask_secrets: bool = True) -> Dict[str, Any]:
        """Export all settings as a dictionary.

        Args:
            mask_secrets: If True, mask the password part of the connection string

        Returns:
            Dictionary containing all settings
        """
        settings = {
            "application": self.application.to_dict(),
            "storage": self.storage.to_dict(),
            "database": self.database.to_dict(),
        }

        if mask_secrets:
            settings["database"]["connection_string"] = mask_connection_string(
                settings["database"]["connection_string"]
            )

        return settings

    def validate(self) -> Dict[str, List[str]]:
        """Validate current settings.

        Returns:
            Dictionary with validation errors by category
        """
        errors: Dict[str, List[str]] = {
            "application": [],
            "storage": [],
            "database": [],
        }

        # Application validation
        if not self.application.name:
            errors["application"].append("Application name is required")
        if self.application.log_level not in [
            "TRACE",
            "DEBUG",
            "INFO",
            "SUCCESS",
            "WARNING",
            "ERROR",
            "CRITICAL",
        ]:
            errors["application"].append("Invalid log level")

        # Storage validation
        if not self.storage.table_name_settings:
            errors["storage"].append("Settings table name is required")
        if "{environment}" not in self.storage.environment_file_pattern:
            errors["storage"].append("Environment file pattern must contain '{environment}'")

        # Database validation
        if not self.database.connection_string:
            errors["database"].append("Database connection string is required")
        if self.database.timeout <= 0:
            errors["database"].append("Database timeout must be positive")

        # Remove empty error lists
        errors = {k: v for k, v in errors.items() if v}

        return errors

    def is_development(self) -> bool:
        """Check if current environment is development."""
        return self.application.environment == Environment.DEVELOPMENT

    def is_testing(self) -> bool:
        """Check if current environment is testing."""
        return self.application.environment == Environment.TESTING

    def is_production(self) -> bool:
        """Check if current environment is production."""
        return self.application.environment == Environment.PRODUCTION


# Convenience function for global access
def get_settings() -> SettingsManager:
    """Get the global settings manager instance.

    Returns:
        SettingsManager singleton instance
    """
    return SettingsManager.get_instance()
