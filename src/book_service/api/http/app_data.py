from dataclasses import dataclass

from src.book_service.core.services import DbSessionService
from src.book_service.entities.book import BookStore


@dataclass
class ApplicationDependencies:
    """Process-wide collaborators built once at startup."""

    book_store: BookStore
    database_service: DbSessionService | None = None
