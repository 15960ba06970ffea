import copy
from threading import Lock
from typing import Generic, Type, TypeVar

from .binder import section_name_for
from .layered import LayeredConfiguration

T = TypeVar("T")


class OptionsMonitor(Generic[T]):
    """Cached typed view of one section, dropped on every configuration change."""

    def __init__(
        self,
        configuration: LayeredConfiguration,
        settings_type: Type[T],
        section_name: str | None = None,
    ):
        self._configuration = configuration
        self._settings_type = settings_type
        self.section_name = section_name or section_name_for(settings_type)
        self._current: T | None = None
        self._lock = Lock()
        self._unsubscribe = configuration.on_change(self._invalidate)

    def _invalidate(self) -> None:
        with self._lock:
            self._current = None

    @property
    def current(self) -> T:
        """Settings object built from the configuration as of the last change.

        Each access returns a private copy; changing it does not affect the
        cached view or later callers.
        """
        with self._lock:
            if self._current is None:
                self._current = self._configuration.get_section(self._settings_type, self.section_name)
            return copy.deepcopy(self._current)

    def close(self) -> None:
        self._unsubscribe()
