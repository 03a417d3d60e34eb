"""Entities, organized by business concept.

Each entity package holds:
- entity.py: domain model and wire format
- table.py: database persistence model
- repository.py: data access layer
"""

from .book import (
    Book,
    BookRepository,
    BookStore,
    BookStoreError,
    BookTable,
    InMemoryBookRepository,
)

__all__ = [
    "Book",
    "BookTable",
    "BookStore",
    "BookRepository",
    "BookStoreError",
    "InMemoryBookRepository",
]
