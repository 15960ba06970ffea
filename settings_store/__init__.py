"""Layered application configuration with a persistent settings database."""

from .configuration import (
    ConfigurationBuilder,
    DatabaseConfigurationProvider,
    LayeredConfiguration,
    OptionsMonitor,
    flatten,
    setting,
    unflatten,
)
from .errors import (
    InvalidArgumentError,
    SchemaMismatchError,
    SettingsStoreError,
    StorageUnavailableError,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigurationBuilder",
    "DatabaseConfigurationProvider",
    "LayeredConfiguration",
    "OptionsMonitor",
    "flatten",
    "setting",
    "unflatten",
    "SettingsStoreError",
    "InvalidArgumentError",
    "StorageUnavailableError",
    "SchemaMismatchError",
]
