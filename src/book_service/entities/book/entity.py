"""Entity: Book."""

from typing import Any

from pydantic import Field

from src.book_service.entities._base import Entity

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


class Book(Entity):
    """Book entity representing a book in the system.

    No field is required and none is validated beyond its type; the year is a
    32-bit integer. On the wire ``publication_year`` is spelled
    ``publicationYear``; both spellings are accepted on input.
    """

    title: str | None = Field(default=None, description="Title")
    author: str | None = Field(default=None, description="Author")
    publication_year: int | None = Field(
        default=None,
        alias="publicationYear",
        ge=INT32_MIN,
        le=INT32_MAX,
        description="Year of first publication",
    )

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Book):
            return False

        return (
            self.id == other.id
            and self.title == other.title
            and self.author == other.author
            and self.publication_year == other.publication_year
        )

    def __hash__(self) -> int:
        return hash((
            self.id,
            self.title,
            self.author,
            self.publication_year,
        ))
