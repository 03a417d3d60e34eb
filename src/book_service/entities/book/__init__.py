"""Book entity module.

- Book: domain entity and wire format
- BookTable: database persistence model
- BookStore: persistence contract, with BookRepository (relational) and
  InMemoryBookRepository implementations
"""

from .entity import Book
from .repository import (
    BookRepository,
    BookStore,
    BookStoreError,
    InMemoryBookRepository,
)
from .table import BookTable

__all__ = [
    "Book",
    "BookRepository",
    "BookStore",
    "BookStoreError",
    "BookTable",
    "InMemoryBookRepository",
]
