"""Database initialization script."""

from src.book_service.core.services import DbSessionService
from src.book_service.runtime.context import get_config


def init_db() -> None:
    """Create all database tables."""
    database_service = DbSessionService(get_config().database)
    try:
        database_service.create_all()
    finally:
        database_service.dispose()


if __name__ == "__main__":
    init_db()
