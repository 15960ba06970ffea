"""Layered configuration with a database-backed dynamic layer.

Responsibilities:
- Flatten settings dataclasses to colon-delimited keys and back
- Merge ordered providers, later providers overriding earlier ones
- Persist settings sections as rows and notify on changes
"""

from .binder import (
    KEY_DELIMITER,
    FieldKind,
    FieldSpec,
    ScalarType,
    SettingsSchema,
    flatten,
    section_name_for,
    setting,
    settings_schema,
    unflatten,
)
from .database_provider import DatabaseConfigurationProvider
from .layered import ConfigurationBuilder, LayeredConfiguration
from .options import OptionsMonitor
from .providers import (
    ChangeNotifier,
    ConfigurationProvider,
    EnvironmentConfigurationProvider,
    JsonFileConfigurationProvider,
    MemoryConfigurationProvider,
)

__all__ = [
    "KEY_DELIMITER",
    "FieldKind",
    "FieldSpec",
    "ScalarType",
    "SettingsSchema",
    "flatten",
    "section_name_for",
    "setting",
    "settings_schema",
    "unflatten",
    "ChangeNotifier",
    "ConfigurationProvider",
    "MemoryConfigurationProvider",
    "JsonFileConfigurationProvider",
    "EnvironmentConfigurationProvider",
    "DatabaseConfigurationProvider",
    "ConfigurationBuilder",
    "LayeredConfiguration",
    "OptionsMonitor",
]
