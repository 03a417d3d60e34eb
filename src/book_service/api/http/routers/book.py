"""Book API router with CRUD operations."""

from fastapi import APIRouter, Depends, HTTPException, Response

from src.book_service.api.http.deps import get_book_store
from src.book_service.entities.book import Book, BookStore

router = APIRouter(prefix="/books", tags=["books"])


@router.get("", response_model=list[Book])
def list_books(
    store: BookStore = Depends(get_book_store),
) -> list[Book]:
    """List all books in creation order."""
    return store.find_all()


@router.get("/{book_id}", response_model=Book)
def get_book(
    book_id: int,
    store: BookStore = Depends(get_book_store),
) -> Book:
    """Get a book by ID."""
    book = store.find_by_id(book_id)
    if book is None:
        raise HTTPException(status_code=404, detail="Book not found")
    return book


@router.post("", response_model=Book)
def create_book(
    book: Book,
    store: BookStore = Depends(get_book_store),
) -> Book:
    """Create a new book. Any id in the body is ignored."""
    book.id = None
    return store.save(book)


@router.put("/{book_id}", response_model=Book)
def update_book(
    book_id: int,
    book_update: Book,
    store: BookStore = Depends(get_book_store),
) -> Book:
    """Replace a book's fields.

    An unknown id is not an error: the book is stored as a new record.
    """
    book_update.id = book_id
    return store.save(book_update)


@router.delete("/{book_id}")
def delete_book(
    book_id: int,
    store: BookStore = Depends(get_book_store),
) -> Response:
    """Delete a book. Deleting an unknown id succeeds."""
    store.delete_by_id(book_id)
    return Response(status_code=200)
