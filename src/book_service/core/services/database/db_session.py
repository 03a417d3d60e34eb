"""Database engine and session factory used across the application."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from loguru import logger
from sqlalchemy import StaticPool, text
from sqlmodel import Session, SQLModel, create_engine

from src.book_service.runtime.config.config_data import DatabaseConfig
from src.book_service.runtime.context import get_config


class DbSessionService:
    def __init__(self, db_config: DatabaseConfig | None = None):
        """Initialize the shared database engine and session factory."""
        self._config = db_config or get_config().database

        logger.info("Setting up database engine and session factory")
        engine_kwargs = self._get_engine_kwargs(self._config)
        self._engine = create_engine(self._config.connection_string, **engine_kwargs)

    @property
    def engine(self):
        return self._engine

    def _get_engine_kwargs(self, db_config: DatabaseConfig) -> dict[str, Any]:
        """Get backend-specific engine arguments."""
        engine_kwargs: dict[str, Any] = {
            "echo": db_config.echo,
            "connect_args": self._get_connect_args(db_config),
        }

        if db_config.is_memory:
            # One shared connection, otherwise every checkout sees an empty database
            engine_kwargs["poolclass"] = StaticPool
        elif not db_config.is_sqlite:
            engine_kwargs.update(
                {
                    "pool_size": db_config.pool_size,
                    "max_overflow": db_config.max_overflow,
                    "pool_timeout": db_config.pool_timeout,
                    "pool_recycle": db_config.pool_recycle,
                    "pool_pre_ping": True,  # Validate connections before use
                }
            )

        return engine_kwargs

    def _get_connect_args(self, db_config: DatabaseConfig) -> dict[str, Any]:
        connect_args: dict[str, Any] = {}

        if "postgresql" in db_config.url:
            connect_args.update(
                {
                    "application_name": "book_service",
                    "connect_timeout": 30,
                }
            )
        elif db_config.is_sqlite:
            connect_args.update(
                {
                    "check_same_thread": False,  # Handlers run on a threadpool
                    "timeout": 20,  # Lock timeout
                }
            )

        return connect_args

    def create_all(self) -> None:
        """Create all database tables."""
        from src.book_service.entities.book import BookTable  # noqa: F401

        SQLModel.metadata.create_all(self._engine)
        logger.info("Database initialized with tables.")

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(
            self._engine,
            expire_on_commit=False,  # Prevent lazy loading issues
            autoflush=True,
        )

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Transactional scope: commit on success, roll back on error."""
        db = self.get_session()
        try:
            yield db
            db.commit()
        except Exception as e:
            db.rollback()
            logger.bind(
                error_type=type(e).__name__,
                error_message=str(e),
            ).error("Database transaction failed")
            raise
        finally:
            db.close()

    def health_check(self) -> bool:
        """Perform a health check on the database connection."""
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                return True
        except Exception as e:
            logger.bind(
                error_type=type(e).__name__,
                error_message=str(e),
            ).error("Database health check failed")
            return False

    def dispose(self) -> None:
        """Close every pooled connection."""
        self._engine.dispose()
        logger.info("Database engine disposed")
