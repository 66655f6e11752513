"""
Database session management for the Lending Catalog.

The :class:`DatabaseManager` owns the engine and session factory for one
database. It is constructed once at startup and handed to the catalog store,
so every request shares the same pooled engine while each store call opens
its own short-lived session.

SQLite needs extra care when several threads write at once:

1. ``PRAGMA foreign_keys=ON`` so borrow records cannot reference missing books
2. The pysqlite busy timeout so a writer waits for the lock instead of failing
3. ``BEGIN IMMEDIATE`` so a transaction takes the write lock up front; a
   deferred transaction that reads first and writes later can fail with
   "database is locked" when two of them try to upgrade at the same time
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .schema import Base

# Configure logging for database operations
logger = logging.getLogger(__name__)


class DatabaseManager:
    """
    Manages the database engine and sessions for the catalog.

    This class provides:
    - Lazily created engine with per-dialect settings
    - Session factory with explicit transactions
    - Schema creation and connection health checks
    """

    def __init__(self, database_url: str, sqlite_busy_timeout: float = 5.0):
        """
        Initialize the database manager.

        Args:
            database_url: SQLAlchemy database URL
            sqlite_busy_timeout: Seconds a SQLite writer waits for the lock
        """
        self.database_url = database_url
        self.sqlite_busy_timeout = sqlite_busy_timeout
        self._engine: Engine | None = None
        self._session_factory: sessionmaker | None = None

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def engine(self) -> Engine:
        """
        Get or create the database engine.

        SQLite engines use a connection per thread from the default pool,
        with foreign keys and immediate write transactions enabled.
        Other databases get a sized pool with pre-ping.
        """
        if self._engine is None:
            if self.is_sqlite:
                self._engine = create_engine(
                    self.database_url,
                    connect_args={
                        "check_same_thread": False,
                        "timeout": self.sqlite_busy_timeout,
                    },
                    echo=False,
                )
                _configure_sqlite(self._engine)
            else:
                self._engine = create_engine(
                    self.database_url,
                    pool_size=10,
                    max_overflow=20,
                    pool_pre_ping=True,  # Verify connections before use
                    echo=False,
                )

            logger.info("Database engine created: %s", self._engine.url)

        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        """Get or create the session factory."""
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine,
                autocommit=False,
                autoflush=False,
                expire_on_commit=False,  # Keep objects usable after commit
            )
        return self._session_factory

    def create_session(self) -> Session:
        """
        Create a new database session.

        Callers are responsible for closing it; prefer :meth:`session_scope`.
        """
        return self.session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope for database operations.

        ```python
        with manager.session_scope() as session:
            session.execute(...)
        # Committed on success, rolled back on any exception
        ```

        Yields:
            Database session

        Raises:
            Any database errors are logged and re-raised
        """
        session = self.create_session()
        try:
            yield session
            session.commit()
            logger.debug("Database transaction committed successfully")
        except Exception:
            logger.debug("Rolling back database transaction")
            session.rollback()
            raise
        finally:
            session.close()

    def init_database(self, drop_existing: bool = False) -> None:
        """
        Initialize the database schema.

        Args:
            drop_existing: If True, drop all tables before creating
        """
        engine = self.engine

        if drop_existing:
            logger.warning("Dropping all existing tables...")
            Base.metadata.drop_all(bind=engine)

        logger.info("Creating database tables...")
        Base.metadata.create_all(bind=engine)
        logger.info("Database initialization complete")

    def verify_connection(self) -> bool:
        """
        Verify the database connection is working.

        Returns:
            True if connection is successful, False otherwise
        """
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.exception("Database connection failed")
            return False
        logger.info("Database connection verified")
        return True

    def close(self) -> None:
        """Dispose of the engine and its pooled connections."""
        if self._engine:
            self._engine.dispose()
            logger.info("Database engine disposed")
        self._engine = None
        self._session_factory = None


def _configure_sqlite(engine: Engine) -> None:
    """Install the pysqlite connection and transaction hooks."""

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ARG001
        # Let SQLAlchemy emit BEGIN itself instead of pysqlite's implicit one
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")
