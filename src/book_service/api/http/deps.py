"""FastAPI dependency implementations."""

from __future__ import annotations

from fastapi import Request

from src.book_service.api.http.app_data import ApplicationDependencies
from src.book_service.core.services import DbSessionService
from src.book_service.entities.book import BookStore


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    """Get the collaborators built at startup."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps


def get_book_store(request: Request) -> BookStore:
    """Get the book store instance."""
    return get_app_dependencies(request).book_store


def get_database_service(request: Request) -> DbSessionService | None:
    """Get the database service, if the store is database backed."""
    return get_app_dependencies(request).database_service
