"""Test configuration and fixtures for the Lending Catalog.

Every test that touches the database gets its own SQLite file under
``tmp_path``, so tests never share state. A file (not ``:memory:``) is used
because the concurrency tests open one connection per thread.

The catalog fixtures load three books with known ids:

    1 - Clean Code
    2 - Design Patterns
    3 - The PHP Manual
"""

import os
from collections.abc import Generator
from pathlib import Path

import logfire
import pytest
from werkzeug.test import Client

from lending_catalog.config import CatalogConfig, reset_config
from lending_catalog.database import (
    CatalogEntry,
    CatalogStore,
    DatabaseManager,
    seed_catalog,
)
from lending_catalog.http.app import LendingApplication, create_app
from lending_catalog.services import LendingService

SCENARIO_CATALOG = (
    CatalogEntry(title="Clean Code", author="Robert C. Martin"),
    CatalogEntry(title="Design Patterns", author="Gang of Four"),
    CatalogEntry(title="The PHP Manual", author="PHP Documentation Team"),
)


# === Pytest Configuration ===


@pytest.fixture(scope="session", autouse=True)
def local_logfire():
    """Keep request spans in-process; nothing is exported or printed."""
    logfire.configure(send_to_logfire=False, console=False)


# === Test Database Fixtures ===


@pytest.fixture
def test_db_path(tmp_path: Path) -> Path:
    """Provide a temporary database path for each test."""
    return tmp_path / "test_catalog.db"


@pytest.fixture
def test_database_url(test_db_path: Path) -> str:
    """Provide a SQLAlchemy database URL for testing."""
    return f"sqlite:///{test_db_path}"


@pytest.fixture
def db_manager(test_database_url: str) -> Generator[DatabaseManager, None, None]:
    """Provide a database manager with an empty schema."""
    manager = DatabaseManager(test_database_url, sqlite_busy_timeout=30.0)
    manager.init_database()
    yield manager
    manager.close()


@pytest.fixture
def seeded_manager(db_manager: DatabaseManager) -> DatabaseManager:
    """Database manager whose catalog holds the three scenario books."""
    seed_catalog(db_manager, SCENARIO_CATALOG, reset=True)
    return db_manager


@pytest.fixture
def store(seeded_manager: DatabaseManager) -> CatalogStore:
    return CatalogStore(seeded_manager)


@pytest.fixture
def service(store: CatalogStore) -> LendingService:
    return LendingService(store)


# === Configuration Fixtures ===


@pytest.fixture
def test_config(test_db_path: Path) -> Generator[CatalogConfig, None, None]:
    """Provide a test-specific service configuration."""
    reset_config()

    config = CatalogConfig(
        service_name="test-lending-catalog",
        service_version="0.0.1-test",
        database_path=test_db_path,
        sqlite_busy_timeout=30.0,
        debug=True,
        log_level="DEBUG",
    )

    yield config

    reset_config()


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Provide a clean environment without LENDING_CATALOG_* variables."""
    original_env = os.environ.copy()

    for key in list(os.environ.keys()):
        if key.startswith("LENDING_CATALOG_"):
            del os.environ[key]

    yield

    os.environ.clear()
    os.environ.update(original_env)


# === HTTP Fixtures ===


@pytest.fixture
def app(test_config: CatalogConfig, seeded_manager: DatabaseManager) -> LendingApplication:
    """The WSGI application wired to the seeded test database."""
    return create_app(test_config, seeded_manager)


@pytest.fixture
def client(app: LendingApplication) -> Client:
    """Werkzeug test client for in-process requests."""
    return Client(app)


# === Cleanup Fixtures ===


@pytest.fixture(autouse=True)
def cleanup_after_test():
    """Reset the process configuration after each test."""
    yield
    reset_config()
