"""Wiring of the layered configuration used by applications.

Layers, lowest priority first:
    appsettings.json
    appsettings.{environment}.json
    appsettings.site.json
    environment variables (SETTINGS_STORE_ prefix)
    settings database

The site file names the settings database. When it does not define a
Database section yet, it is written with the configured default connection
string so later runs find the same database.
"""

import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path

import dotenv
from loguru import logger

from .config import SettingsManager, mask_connection_string
from .configuration import (
    KEY_DELIMITER,
    ConfigurationBuilder,
    DatabaseConfigurationProvider,
    LayeredConfiguration,
    flatten,
    setting,
)
from .errors import InvalidArgumentError

DATABASE_SECTION = "Database"


@dataclass
class DatabaseSection:
    """Location of the settings database."""

    settings_connection_string: str | None = setting("SettingsConnectionString", default=None)


@dataclass
class SiteSettings:
    """Contents of the site specific settings file."""

    database: DatabaseSection = setting(DATABASE_SECTION, default_factory=DatabaseSection)


def configure_logging(settings: SettingsManager | None = None) -> None:
    """Route loguru output to stderr at the configured level."""
    settings = settings or SettingsManager.get_instance()
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.application.log_level,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    )


def _nest(flat: dict[str, str]) -> dict:
    nested: dict = {}
    for key, value in flat.items():
        *parents, leaf = key.split(KEY_DELIMITER)
        node = nested
        for part in parents:
            node = node.setdefault(part, {})
        node[leaf] = value
    return nested


def write_site_settings(path: str | os.PathLike, site: SiteSettings) -> None:
    """Write site settings as a JSON document."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(_nest(flatten(site)), indent=2), encoding="utf-8")


def build_configuration(
    base_path: str | os.PathLike,
    environment: str | None = None,
    settings: SettingsManager | None = None,
) -> tuple[LayeredConfiguration, DatabaseConfigurationProvider]:
    """Build the layered configuration with the settings database on top.

    Args:
        base_path: Directory holding the appsettings files
        environment: Environment name for appsettings.{environment}.json;
            defaults to the configured application environment
        settings: Settings of the store; defaults to the global instance

    Returns:
        The merged configuration and the database provider used to update sections

    Raises:
        InvalidArgumentError: if the store settings fail validation
    """
    dotenv.load_dotenv()
    settings = settings or SettingsManager.get_instance()
    errors = settings.validate()
    if errors:
        logger.error("Settings validation errors: {}", errors)
        raise InvalidArgumentError(f"Invalid settings store configuration: {errors}")

    storage = settings.storage
    base_path = Path(base_path)
    environment = environment or settings.application.environment.value
    site_path = base_path / storage.site_file_name

    builder = (
        ConfigurationBuilder()
        .add_json_file(base_path / storage.base_file_name, optional=True)
        .add_json_file(base_path / storage.environment_file_pattern.format(environment=environment), optional=True)
        .add_json_file(site_path, optional=True)
        .add_environment_variables(storage.environment_variable_prefix)
    )
    configuration = builder.build()

    if not configuration.exists(DATABASE_SECTION):
        logger.info("No site specific settings found, creating {}", site_path)
        write_site_settings(
            site_path,
            SiteSettings(DatabaseSection(settings.database.connection_string)),
        )
        configuration.reload()

    database = configuration.get_section(DatabaseSection, DATABASE_SECTION)
    connection_string = database.settings_connection_string
    logger.info("Using settings database {}", mask_connection_string(connection_string))
    configuration.close()

    provider = DatabaseConfigurationProvider(connection_string=connection_string)
    configuration = builder.add(provider).build()
    return configuration, provider
