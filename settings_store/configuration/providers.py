"""Flat key/value configuration providers.

A provider owns one flat map of colon-delimited keys to string values. The
map is rebuilt wholesale on every load and installed with a single
reference assignment, so concurrent readers observe either the previous or
the new map and never a partially built one. Loads run one at a time per
provider, so a slow read can never install an older map over a newer one.
"""

import json
import os
from pathlib import Path
from threading import Lock
from types import MappingProxyType
from typing import Any, Callable, Mapping

from loguru import logger

from .binder import KEY_DELIMITER

ENV_SEPARATOR = "__"


class ChangeNotifier:
    """Observer list for the "configuration changed" signal."""

    def __init__(self):
        self._callbacks: list[Callable[[], None]] = []
        self._lock = Lock()

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a callback; returns a function that unregisters it."""
        with self._lock:
            self._callbacks.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return unsubscribe

    def notify(self) -> None:
        with self._lock:
            callbacks = list(self._callbacks)
        for callback in callbacks:
            callback()


class ConfigurationProvider:
    """Base class of all providers.

    Subclasses implement _read() returning a freshly built flat map.
    """

    def __init__(self):
        self._data: dict[str, str | None] = {}
        self._notifier = ChangeNotifier()
        self._load_lock = Lock()

    @property
    def name(self) -> str:
        return type(self).__name__

    @property
    def data(self) -> Mapping[str, str | None]:
        """Read-only view of the current flat map."""
        return MappingProxyType(self._data)

    def _read(self) -> dict[str, str | None]:
        raise NotImplementedError

    def load(self, reload: bool = False) -> None:
        """Rebuild the flat map; on reload, fire the change notification.

        Reads and installs are serialised, so the installed map is always the
        most recently read one.
        """
        with self._load_lock:
            data = self._read()
            self._data = data
        logger.debug("{} loaded {} keys", self.name, len(data))
        if reload:
            self._notifier.notify()

    def try_get(self, key: str) -> tuple[bool, str | None]:
        """Look up an exact key; returns (found, value)."""
        data = self._data
        if key in data:
            return True, data[key]
        return False, None

    def get(self, key: str, default: str | None = None) -> str | None:
        found, value = self.try_get(key)
        return value if found else default

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def keys(self) -> list[str]:
        return list(self._data)

    def on_change(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Subscribe to change notifications; returns an unsubscribe function."""
        return self._notifier.subscribe(callback)

    def __repr__(self) -> str:
        return f"<{self.name}(keys={len(self._data)})>"


class MemoryConfigurationProvider(ConfigurationProvider):
    """Static flat map supplied by the caller."""

    def __init__(self, data: Mapping[str, str | None] | None = None):
        super().__init__()
        self._initial = dict(data or {})

    def _read(self) -> dict[str, str | None]:
        return dict(self._initial)


def _flatten_json(value: Any, prefix: str, out: dict[str, str | None]) -> None:
    if isinstance(value, dict):
        for key, child in value.items():
            _flatten_json(child, f"{prefix}{KEY_DELIMITER}{key}" if prefix else str(key), out)
    elif isinstance(value, list):
        for index, child in enumerate(value):
            _flatten_json(child, f"{prefix}{KEY_DELIMITER}{index}" if prefix else str(index), out)
    elif isinstance(value, bool):
        out[prefix] = "true" if value else "false"
    elif value is None:
        out[prefix] = ""
    else:
        out[prefix] = str(value)


class JsonFileConfigurationProvider(ConfigurationProvider):
    """Flat map parsed from a JSON document.

    Nested objects become colon paths, array items are keyed by index.
    """

    def __init__(self, path: str | os.PathLike, optional: bool = False):
        super().__init__()
        self.path = Path(path)
        self.optional = optional

    @property
    def name(self) -> str:
        return f"{type(self).__name__} for '{self.path.name}' ({'Optional' if self.optional else 'Required'})"

    def _read(self) -> dict[str, str | None]:
        if not self.path.exists():
            if self.optional:
                logger.debug("Optional settings file {} not found", self.path)
                return {}
            raise FileNotFoundError(f"Settings file not found: {self.path}")

        with self.path.open("r", encoding="utf-8") as f:
            document = json.load(f)
        if not isinstance(document, dict):
            raise ValueError(f"Settings file {self.path} must contain a JSON object")

        data: dict[str, str | None] = {}
        _flatten_json(document, "", data)
        return data


class EnvironmentConfigurationProvider(ConfigurationProvider):
    """Environment variables, '__' mapped to ':' and the prefix stripped.

    Keys are case-sensitive like every other key, so variable names must
    spell keys the way the settings declare them:
    SETTINGS_STORE_Email__Host overrides Email:Host, SETTINGS_STORE_EMAIL__HOST
    does not.
    """

    def __init__(self, prefix: str = ""):
        super().__init__()
        self.prefix = prefix

    @property
    def name(self) -> str:
        return f"{type(self).__name__} Prefix: '{self.prefix}'"

    def _read(self) -> dict[str, str | None]:
        return {
            key[len(self.prefix):].replace(ENV_SEPARATOR, KEY_DELIMITER): value
            for key, value in os.environ.items()
            if key.startswith(self.prefix) and len(key) > len(self.prefix)
        }
