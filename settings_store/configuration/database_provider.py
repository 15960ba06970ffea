"""Configuration provider backed by the config settings table.

Rows are exposed as flat keys "section:name". Sections are written through
update_section(), which reconciles the persisted rows of a section against
a settings object so that exactly its non-default fields remain stored.
"""

from threading import Lock
from typing import Any

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from ..database import SessionManager, init_database
from ..errors import StorageUnavailableError
from ..repositories import ConfigSettingRepository
from .binder import flatten, section_name_for
from .providers import ConfigurationProvider


class DatabaseConfigurationProvider(ConfigurationProvider):
    """Dynamic configuration provider reading and writing the settings table.

    Usage:
        provider = DatabaseConfigurationProvider("sqlite:///settings.db3")
        provider.load()
        provider.update_section(email_settings, "Email")
        provider.get("Email:Host")
    """

    def __init__(
        self,
        connection_string: str | None = None,
        session_manager: SessionManager | None = None,
    ):
        super().__init__()
        self._session_manager = session_manager or SessionManager(connection_string=connection_string)
        self._section_locks: dict[str, Lock] = {}
        self._section_locks_guard = Lock()

    @property
    def session_manager(self) -> SessionManager:
        return self._session_manager

    def _section_lock(self, section: str) -> Lock:
        with self._section_locks_guard:
            return self._section_locks.setdefault(section, Lock())

    def _ensure_created(self) -> None:
        try:
            init_database(self._session_manager)
        except SQLAlchemyError as e:
            logger.error("Could not initialize settings database: {}", e)
            raise StorageUnavailableError("Settings database could not be initialized") from e

    def _read(self) -> dict[str, str | None]:
        try:
            with self._session_manager.session() as session:
                rows = ConfigSettingRepository(session).get_all()
                return {row.key: row.value for row in rows}
        except SQLAlchemyError as e:
            logger.error("Could not load settings from database: {}", e)
            raise StorageUnavailableError("Settings could not be loaded from the database") from e

    def load(self, reload: bool = False) -> None:
        """Rebuild the flat map from every persisted row.

        The first load makes sure the settings table exists; a reload fires
        the change notification once the new map is installed.

        Raises:
            StorageUnavailableError: if the database cannot be read
        """
        if not reload:
            self._ensure_created()
        super().load(reload=reload)
        logger.info("Loaded {} settings from database", len(self._data))

    def update_section(self, settings: Any, section_name: str | None = None) -> None:
        """Persist the non-default fields of settings as the rows of a section.

        Rows whose key is no longer produced by the settings object are
        deleted, existing rows are updated in place and missing ones are
        inserted, all in one transaction. The provider then reloads.

        Args:
            settings: Settings dataclass instance
            section_name: Target section; defaults to the settings type's section name

        Raises:
            InvalidArgumentError: if settings is None or not a settings dataclass
            StorageUnavailableError: if the transaction failed; nothing is written
        """
        desired = flatten(settings)
        section = section_name or section_name_for(type(settings))

        with self._section_lock(section):
            try:
                with self._session_manager.session() as session:
                    repository = ConfigSettingRepository(session)
                    pending_delete = {row.name: row for row in repository.get_by_section(section)}
                    inserted = updated = 0

                    for name, value in desired.items():
                        existing = pending_delete.pop(name, None)
                        if existing is None:
                            repository.add(section, name, value)
                            inserted += 1
                        elif existing.value != value:
                            existing.value = value
                            updated += 1

                    deleted = repository.delete_many(pending_delete.values())
            except SQLAlchemyError as e:
                logger.error("Could not update settings section {}: {}", section, e)
                raise StorageUnavailableError(f"Settings section '{section}' could not be saved") from e

            logger.info(
                "Updated settings section {}: {} inserted, {} updated, {} deleted",
                section, inserted, updated, deleted,
            )
            self.load(reload=True)
