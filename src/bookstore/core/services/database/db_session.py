"""Database engine and session factory used across the application."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from loguru import logger
from sqlalchemy import StaticPool, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, create_engine

from src.bookstore.core.errors import DatabaseConnectionError
from src.bookstore.core.services.database.db_utils import sanitize_database_url
from src.bookstore.runtime.config.config_data import DatabaseConfig
from src.bookstore.runtime.context import get_config


class DbSessionService:
    """Owns the engine (and its connection pool) shared by every request."""

    def __init__(self, connection_string: str | None = None, engine: Engine | None = None):
        """Initialize the shared database engine and session factory.

        Either pass a ready ``engine`` (tests) or a ``connection_string``;
        without both the configured URL is used as-is.
        """
        if engine is not None:
            self._engine = engine
            return

        logger.info("Setting up database engine and session factory")
        main_config = get_config()
        db_config = main_config.database
        connection_string = connection_string or db_config.url

        engine_kwargs = self._get_engine_kwargs(connection_string, db_config)
        logger.info(
            "Initializing database engine using connection string: {}",
            sanitize_database_url(connection_string),
        )
        try:
            self._engine = create_engine(connection_string, **engine_kwargs)
        except (SQLAlchemyError, ImportError, ValueError) as e:
            raise DatabaseConnectionError(
                f"failed to create database engine: {e}"
            ) from e

        if main_config.app.environment == "production":
            logger.info(
                "Database engine initialized",
                pool_size=db_config.pool_size,
                max_overflow=db_config.max_overflow,
                pool_timeout=db_config.pool_timeout,
                pool_recycle=db_config.pool_recycle,
            )

    def _get_engine_kwargs(self, connection_string: str, db_config: DatabaseConfig) -> dict[str, Any]:
        url = make_url(connection_string)
        kwargs: dict[str, Any] = {
            "echo": db_config.echo,
            "pool_pre_ping": True,  # Validate connections before use
        }

        if url.get_backend_name() == "sqlite":
            kwargs["connect_args"] = {
                "check_same_thread": False,  # Sessions hop across worker threads
                "timeout": 20,  # Lock timeout
            }
            if url.database in (None, "", ":memory:"):
                # One shared connection, otherwise every checkout sees an empty database
                kwargs["poolclass"] = StaticPool
                return kwargs

        kwargs.update(
            {
                "pool_size": db_config.pool_size,
                "max_overflow": db_config.max_overflow,
                "pool_timeout": db_config.pool_timeout,
                "pool_recycle": db_config.pool_recycle,
            }
        )
        return kwargs

    @property
    def engine(self) -> Engine:
        return self._engine

    def verify_connection(self) -> None:
        """Open one connection and run ``SELECT 1``.

        Raises:
            DatabaseConnectionError: the database is unreachable.
        """
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise DatabaseConnectionError(f"failed to connect to database: {e}") from e
        logger.info("Database connection established")

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(
            self._engine,
            expire_on_commit=False,  # Rows stay readable after the request commits
            autoflush=True,
        )

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Context manager style helper for scripts and tests."""
        db = self.get_session()
        try:
            yield db
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(
                "Database transaction failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise
        finally:
            db.close()

    def health_check(self) -> bool:
        """Perform a health check on the database connection."""
        try:
            self.verify_connection()
            return True
        except DatabaseConnectionError as e:
            logger.error(
                "Database health check failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return False

    def get_pool_status(self) -> dict:
        """Get current connection pool status for monitoring."""
        pool = self._engine.pool
        return {
            "size": getattr(pool, "size", lambda: 0)(),
            "checked_in": getattr(pool, "checkedin", lambda: 0)(),
            "checked_out": getattr(pool, "checkedout", lambda: 0)(),
            "overflow": getattr(pool, "overflow", lambda: 0)(),
        }

    def dispose(self) -> None:
        self._engine.dispose()
