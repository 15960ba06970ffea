"""Merged view over an ordered list of configuration providers.

Providers are consulted from last to first, so a provider added later
overrides every earlier one for the keys it defines. Keys are compared
exactly, including case. Lookups run against the providers' live maps; a
change in any provider is visible on the next read.
"""

import os
from typing import Callable, Iterable, Type, TypeVar

from .binder import KEY_DELIMITER, section_name_for, unflatten
from .providers import (
    ChangeNotifier,
    ConfigurationProvider,
    EnvironmentConfigurationProvider,
    JsonFileConfigurationProvider,
    MemoryConfigurationProvider,
)

T = TypeVar("T")


class LayeredConfiguration:
    """Read-only merged configuration."""

    def __init__(self, providers: Iterable[ConfigurationProvider]):
        self._providers = tuple(providers)
        self._notifier = ChangeNotifier()
        self._unsubscribers = [p.on_change(self._notifier.notify) for p in self._providers]

    @property
    def providers(self) -> tuple[ConfigurationProvider, ...]:
        return self._providers

    def _resolve(self, key: str) -> tuple[ConfigurationProvider | None, str | None]:
        for provider in reversed(self._providers):
            found, value = provider.try_get(key)
            if found:
                return provider, value
        return None, None

    def try_get(self, key: str) -> tuple[bool, str | None]:
        """Resolve a key; returns (found, value)."""
        provider, value = self._resolve(key)
        return provider is not None, value

    def get(self, key: str, default: str | None = None) -> str | None:
        found, value = self.try_get(key)
        return value if found else default

    def __getitem__(self, key: str) -> str | None:
        found, value = self.try_get(key)
        if not found:
            raise KeyError(key)
        return value

    def __contains__(self, key: str) -> bool:
        return self.try_get(key)[0]

    def keys(self) -> list[str]:
        """Every key defined by at least one provider, sorted."""
        merged: set[str] = set()
        for provider in self._providers:
            merged.update(provider.keys())
        return sorted(merged)

    def get_section_data(self, section: str) -> dict[str, str | None]:
        """Merged sub-map of all keys below section, with the prefix stripped."""
        prefix = section + KEY_DELIMITER
        merged: dict[str, str | None] = {}
        for provider in self._providers:
            for key, value in provider.data.items():
                if key.startswith(prefix):
                    merged[key[len(prefix):]] = value
        return merged

    def exists(self, section: str) -> bool:
        """True when the section has a value or any sub-key."""
        return section in self or bool(self.get_section_data(section))

    def get_section(self, settings_type: Type[T], section_name: str | None = None) -> T:
        """Typed view of a section.

        Args:
            settings_type: Settings dataclass to build
            section_name: Section to read; defaults to the type's section name
        """
        section = section_name or section_name_for(settings_type)
        return unflatten(self.get_section_data(section), settings_type)

    def reload(self) -> None:
        """Reload every provider; each fires its change notification."""
        for provider in self._providers:
            provider.load(reload=True)

    def on_change(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Subscribe to changes of any provider."""
        return self._notifier.subscribe(callback)

    def debug_view(self) -> str:
        """One line per key: effective value and the provider supplying it."""
        lines = []
        for key in self.keys():
            provider, value = self._resolve(key)
            if provider is not None:
                lines.append(f"{key}={value} ({provider.name})")
        return "\n".join(lines)

    def close(self) -> None:
        """Stop listening to provider changes."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []


class ConfigurationBuilder:
    """Collects providers in priority order (lowest first) and builds the view.

    Usage:
        configuration = (
            ConfigurationBuilder()
            .add_json_file("appsettings.json")
            .add_environment_variables("MYAPP_")
            .build()
        )
    """

    def __init__(self):
        self._providers: list[ConfigurationProvider] = []

    @property
    def providers(self) -> list[ConfigurationProvider]:
        return list(self._providers)

    def add(self, provider: ConfigurationProvider) -> "ConfigurationBuilder":
        self._providers.append(provider)
        return self

    def add_in_memory(self, data: dict[str, str | None]) -> "ConfigurationBuilder":
        return self.add(MemoryConfigurationProvider(data))

    def add_json_file(self, path: str | os.PathLike, optional: bool = False) -> "ConfigurationBuilder":
        return self.add(JsonFileConfigurationProvider(path, optional=optional))

    def add_environment_variables(self, prefix: str = "") -> "ConfigurationBuilder":
        return self.add(EnvironmentConfigurationProvider(prefix))

    def build(self) -> LayeredConfiguration:
        """Load every provider and return the merged configuration."""
        for provider in self._providers:
            provider.load()
        return LayeredConfiguration(self._providers)
