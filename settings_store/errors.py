"""Exceptions raised by the settings store.

All errors derive from SettingsStoreError so callers can catch the whole
family. Argument and schema errors also derive from ValueError.
"""


class SettingsStoreError(Exception):
    """Base class for settings store errors."""


class InvalidArgumentError(SettingsStoreError, ValueError):
    """A required settings object was missing or not a settings dataclass."""


class StorageUnavailableError(SettingsStoreError):
    """The backing database could not be reached or a transaction failed.

    The store is left unchanged; no retry is attempted.
    """


class SchemaMismatchError(SettingsStoreError, ValueError):
    """A flat key or value could not be mapped onto a settings type.

    Raised for values that cannot be parsed into their field type, and for
    unknown keys when unflattening in strict mode.
    """
