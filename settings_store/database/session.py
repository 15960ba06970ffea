from contextlib import contextmanager
from typing import Generator

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from ..config import SettingsManager
from .base import Base


class SessionManager:
    """Manages database sessions and engine lifecycle."""

    _engine: Engine
    _session_factory: sessionmaker

    def __init__(
        self,
        connection_string: str | None = None,
        timeout: float | None = None,
        echo: bool | None = None,
    ):
        """Initialize session manager.

        Args:
            connection_string: SQLAlchemy URL; defaults to the configured settings database
            timeout: Seconds to wait for a connection or a database lock
            echo: Log emitted SQL
        """
        settings = SettingsManager.get_instance()
        url = make_url(connection_string or settings.database.connection_string)
        timeout = settings.database.timeout if timeout is None else timeout
        echo = settings.database.echo if echo is None else echo

        if url.get_backend_name() == "sqlite":
            # sqlite3 waits on locked databases instead of failing immediately
            self._engine = create_engine(
                url,
                echo=echo,
                connect_args={"timeout": timeout, "check_same_thread": False},
            )
        else:
            self._engine = create_engine(url, echo=echo, pool_timeout=timeout, pool_pre_ping=True)

        self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)

    @property
    def engine(self) -> Engine:
        """Get the database engine."""
        return self._engine

    def create_all(self):
        """Create all missing tables in the database."""
        Base.metadata.create_all(self._engine)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Provide a transactional scope around a series of operations."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get_session(self) -> Session:
        """Get a new database session."""
        return self._session_factory()

    def close(self):
        """Close the engine and cleanup resources."""
        self._engine.dispose()


# Global session manager instance
_session_manager: SessionManager | None = None


def init_session_manager(
    connection_string: str | None = None,
) -> SessionManager:
    """Initialize the global database session manager."""
    global _session_manager
    _session_manager = SessionManager(
        connection_string=connection_string
    )
    return _session_manager


def get_session_manager() -> SessionManager:
    """Get the global session manager instance."""
    if _session_manager is None:
        raise RuntimeError(
            "Database not initialized. Call init_session_manager() first."
        )
    return _session_manager


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Get a database session as a context manager.

    Usage:
        with get_session() as session:
            # Use session
            pass
    """
    manager = get_session_manager()
    with manager.session() as session:
        yield session
