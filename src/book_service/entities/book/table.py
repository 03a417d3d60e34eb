"""Book database table model."""

from src.book_service.entities._base import EntityTable


class BookTable(EntityTable, table=True):
    """Database persistence model for books.

    This represents how the Book entity is stored in the database. It's
    separate from the domain entity to keep the wire format and the schema
    independent.
    """

    __tablename__ = "books"
    # Deleted ids must never be handed out again.
    __table_args__ = {"sqlite_autoincrement": True}

    title: str | None = None
    author: str | None = None
    publication_year: int | None = None
