"""Book persistence: the store contract and its implementations."""

from __future__ import annotations

import threading
from typing import Protocol, runtime_checkable

from loguru import logger
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from src.book_service.core.services.database.db_session import DbSessionService

from .entity import Book
from .table import BookTable

# Widest integer key a SQL backend can hold; ids outside it never exist.
MIN_BOOK_ID = -(2**63)
MAX_BOOK_ID = 2**63 - 1


def _storable_id(book_id: int | None) -> bool:
    return book_id is not None and MIN_BOOK_ID <= book_id <= MAX_BOOK_ID


class BookStoreError(RuntimeError):
    """Raised when the underlying store fails (connectivity, constraint, ...)."""


@runtime_checkable
class BookStore(Protocol):
    """Generic store of books keyed by id.

    ``save`` inserts when the book has no id or its id is unknown, in which case
    a fresh id is assigned; otherwise it overwrites the stored record.
    ``delete_by_id`` succeeds silently when the id is absent.
    """

    def save(self, book: Book) -> Book: ...

    def find_all(self) -> list[Book]: ...

    def find_by_id(self, book_id: int) -> Book | None: ...

    def delete_by_id(self, book_id: int) -> None: ...


class BookRepository:
    """Data-access layer for books backed by a relational database.

    Each call runs in its own session and commits before returning.
    """

    def __init__(self, database_service: DbSessionService) -> None:
        self._db = database_service

    def save(self, book: Book) -> Book:
        try:
            with self._db.session_scope() as session:
                row = session.get(BookTable, book.id) if _storable_id(book.id) else None
                if row is None:
                    row = BookTable(**book.model_dump(exclude={"id"}))
                    session.add(row)
                else:
                    row.sqlmodel_update(book.model_dump(exclude={"id"}))
                session.flush()
                session.refresh(row)
                saved = Book.model_validate(row, from_attributes=True)
        except SQLAlchemyError as e:
            raise BookStoreError(f"Failed to save book: {e}") from e

        logger.debug("Saved book {}", saved.id)
        return saved

    def find_all(self) -> list[Book]:
        try:
            with self._db.session_scope() as session:
                rows = session.exec(select(BookTable).order_by(BookTable.id)).all()
                return [Book.model_validate(row, from_attributes=True) for row in rows]
        except SQLAlchemyError as e:
            raise BookStoreError(f"Failed to list books: {e}") from e

    def find_by_id(self, book_id: int) -> Book | None:
        if not _storable_id(book_id):
            return None
        try:
            with self._db.session_scope() as session:
                row = session.get(BookTable, book_id)
                if row is None:
                    return None
                return Book.model_validate(row, from_attributes=True)
        except SQLAlchemyError as e:
            raise BookStoreError(f"Failed to load book {book_id}: {e}") from e

    def delete_by_id(self, book_id: int) -> None:
        if not _storable_id(book_id):
            return
        try:
            with self._db.session_scope() as session:
                session.exec(delete(BookTable).where(BookTable.id == book_id))
        except SQLAlchemyError as e:
            raise BookStoreError(f"Failed to delete book {book_id}: {e}") from e

        logger.debug("Deleted book {}", book_id)


class InMemoryBookRepository:
    """Process-local store with the same contract as ``BookRepository``.

    Ids come from a monotonic counter, so they are never reused.
    """

    def __init__(self) -> None:
        self._books: dict[int, Book] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def save(self, book: Book) -> Book:
        with self._lock:
            book_id = book.id
            if book_id is None or book_id not in self._books:
                book_id = self._next_id
                self._next_id += 1
            saved = book.model_copy(update={"id": book_id})
            self._books[book_id] = saved
            return saved.model_copy()

    def find_all(self) -> list[Book]:
        with self._lock:
            return [self._books[key].model_copy() for key in sorted(self._books)]

    def find_by_id(self, book_id: int) -> Book | None:
        with self._lock:
            book = self._books.get(book_id)
            return book.model_copy() if book is not None else None

    def delete_by_id(self, book_id: int) -> None:
        with self._lock:
            self._books.pop(book_id, None)
