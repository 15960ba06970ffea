import pytest

from settings_store.database import SessionManager
from settings_store.database.migrations import init_database


@pytest.fixture(scope="session")
def test_db_config():
    """Database configuration for testing (SQLite in-memory)."""
    return "sqlite:///:memory:"


@pytest.fixture(scope="function")
def session_manager(test_db_config):
    """Provide a session manager over a fresh in-memory database with all tables."""
    manager = SessionManager(connection_string=test_db_config)
    init_database(manager)

    try:
        yield manager
    finally:
        manager.close()


@pytest.fixture(scope="function")
def db_session(session_manager):
    """Provide a database session for testing.

    The in-memory database lives as long as the session manager, so each
    test starts from empty tables.
    """
    session = session_manager.get_session()

    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="session", autouse=True)
def setup_test_logging():
    """Configure logging for tests."""
    from loguru import logger
    import sys

    # Remove default handlers
    logger.remove()

    # Add test-specific handler with appropriate level
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    )

    yield

    # Cleanup
    logger.remove()
