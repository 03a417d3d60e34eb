"""HTTP-level tests for the /books endpoints."""

from typing import Any

import pytest
from fastapi.testclient import TestClient

from src.book_service.api.http.app import create_app
from src.book_service.entities.book import Book, BookStoreError, InMemoryBookRepository
from src.book_service.runtime.config.config_data import ConfigData

# Larger than any integer key SQLite can hold.
HUGE_ID = 10**20


def _create(client: TestClient, payload: dict[str, Any]) -> dict[str, Any]:
    response = client.post("/books", json=payload)
    assert response.status_code == 200
    return response.json()


class TestBookEndpoints:
    """CRUD scenarios against the database backed app."""

    def test_get_all_books(self, client: TestClient, gatsby, gatsby_sequel):
        _create(client, gatsby)
        _create(client, gatsby_sequel)

        response = client.get("/books")

        assert response.status_code == 200
        books = response.json()
        assert len(books) == 2

        assert books[0]["title"] == "The Great Gatsby"
        assert books[0]["author"] == "F. Scott Fitzgerald"
        assert books[0]["publicationYear"] == 1925

        assert books[1]["title"] == "The Great Gatsby 2"
        assert books[1]["author"] == "F. Scott Fitzgerald"
        assert books[1]["publicationYear"] == 1930

    def test_get_all_books_empty(self, client: TestClient):
        response = client.get("/books")

        assert response.status_code == 200
        assert response.json() == []

    def test_get_book_by_id(self, client: TestClient, gatsby):
        saved = _create(client, gatsby)

        response = client.get(f"/books/{saved['id']}")

        assert response.status_code == 200
        assert response.json() == saved

    def test_get_unknown_book(self, client: TestClient):
        response = client.get("/books/424242")

        assert response.status_code == 404
        assert response.json()["detail"] == "Book not found"

    def test_create_book(self, client: TestClient, gatsby):
        response = client.post("/books", json=gatsby)

        assert response.status_code == 200
        saved = response.json()
        assert saved["id"] is not None
        assert saved["title"] == "The Great Gatsby"
        assert saved["author"] == "F. Scott Fitzgerald"
        assert saved["publicationYear"] == 1925
        assert set(saved) == {"id", "title", "author", "publicationYear"}

    def test_create_ignores_body_id(self, client: TestClient, gatsby, gatsby_sequel):
        first = _create(client, gatsby)

        second = _create(client, {**gatsby_sequel, "id": first["id"]})

        assert second["id"] != first["id"]
        assert client.get(f"/books/{first['id']}").json()["title"] == "The Great Gatsby"

    def test_create_with_null_fields(self, client: TestClient):
        saved = _create(client, {})

        assert saved["id"] is not None
        assert saved["title"] is None
        assert saved["author"] is None
        assert saved["publicationYear"] is None

    def test_update_book(self, client: TestClient, gatsby):
        saved = _create(client, gatsby)

        saved["title"] = "The Great Gatsby (Updated)"
        response = client.put(f"/books/{saved['id']}", json=saved)

        assert response.status_code == 200
        updated = response.json()
        assert updated["id"] == saved["id"]
        assert updated["title"] == "The Great Gatsby (Updated)"
        assert updated["author"] == "F. Scott Fitzgerald"
        assert updated["publicationYear"] == 1925

        fetched = client.get(f"/books/{saved['id']}").json()
        assert fetched == updated

    def test_update_uses_path_id(self, client: TestClient, gatsby, gatsby_sequel):
        first = _create(client, gatsby)
        second = _create(client, gatsby_sequel)

        response = client.put(
            f"/books/{first['id']}", json={**gatsby, "title": "Renamed", "id": second["id"]}
        )

        assert response.json()["id"] == first["id"]
        assert client.get(f"/books/{second['id']}").json()["title"] == "The Great Gatsby 2"

    def test_update_unknown_id_creates_book(self, client: TestClient, gatsby):
        response = client.put("/books/9999", json=gatsby)

        assert response.status_code == 200
        created = response.json()
        assert created["id"] is not None
        assert created["title"] == "The Great Gatsby"
        assert client.get("/books").json() == [created]

    def test_delete_book(self, client: TestClient, gatsby):
        saved = _create(client, gatsby)

        response = client.delete(f"/books/{saved['id']}")

        assert response.status_code == 200
        assert response.content == b""
        assert client.get(f"/books/{saved['id']}").status_code == 404

    def test_delete_unknown_book(self, client: TestClient):
        response = client.delete("/books/31337")

        assert response.status_code == 200
        assert client.get("/books/31337").status_code == 404

    def test_delete_is_idempotent(self, client: TestClient, gatsby):
        saved = _create(client, gatsby)

        assert client.delete(f"/books/{saved['id']}").status_code == 200
        assert client.delete(f"/books/{saved['id']}").status_code == 200

    def test_list_excludes_deleted_and_keeps_order(self, client: TestClient):
        created = [_create(client, {"title": title}) for title in ("A", "B", "C", "D")]

        client.delete(f"/books/{created[1]['id']}")

        titles = [book["title"] for book in client.get("/books").json()]
        assert titles == ["A", "C", "D"]

    def test_ids_not_reused_after_delete(self, client: TestClient, gatsby):
        saved = _create(client, gatsby)
        client.delete(f"/books/{saved['id']}")

        fresh = _create(client, gatsby)

        assert fresh["id"] > saved["id"]

    def test_accepts_snake_case_field_name(self, client: TestClient):
        saved = _create(client, {"title": "Emma", "publication_year": 1815})

        assert saved["publicationYear"] == 1815

    def test_get_id_beyond_storage_range(self, client: TestClient):
        response = client.get(f"/books/{HUGE_ID}")

        assert response.status_code == 404
        assert response.json()["detail"] == "Book not found"

    def test_delete_id_beyond_storage_range(self, client: TestClient):
        response = client.delete(f"/books/{HUGE_ID}")

        assert response.status_code == 200
        assert response.content == b""

    def test_update_id_beyond_storage_range_creates_book(self, client: TestClient, gatsby):
        response = client.put(f"/books/{HUGE_ID}", json=gatsby)

        assert response.status_code == 200
        assert client.get("/books").json() == [response.json()]


class TestBadRequests:
    """Malformed input is a 400, not FastAPI's default 422."""

    def test_create_unparsable_body(self, client: TestClient):
        response = client.post(
            "/books",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"detail": "Bad Request"}

    def test_create_missing_body(self, client: TestClient):
        response = client.post("/books")

        assert response.status_code == 400

    def test_create_wrong_field_type(self, client: TestClient):
        response = client.post("/books", json={"title": "Emma", "publicationYear": "soon"})

        assert response.status_code == 400
        assert client.get("/books").json() == []

    def test_update_wrong_field_type(self, client: TestClient, gatsby):
        saved = _create(client, gatsby)

        response = client.put(f"/books/{saved['id']}", json={"title": ["not", "a", "string"]})

        assert response.status_code == 400
        assert client.get(f"/books/{saved['id']}").json() == saved

    def test_non_integer_path_id(self, client: TestClient):
        assert client.get("/books/abc").status_code == 400

    @pytest.mark.parametrize("year", [2**31, -(2**31) - 1, 10**20])
    def test_create_year_out_of_range(self, client: TestClient, year: int):
        response = client.post("/books", json={"title": "Emma", "publicationYear": year})

        assert response.status_code == 400
        assert client.get("/books").json() == []

    def test_update_year_out_of_range(self, client: TestClient, gatsby):
        saved = _create(client, gatsby)

        response = client.put(f"/books/{saved['id']}", json={"publicationYear": 10**20})

        assert response.status_code == 400
        assert client.get(f"/books/{saved['id']}").json() == saved


class FailingBookStore:
    """Store double whose every operation fails."""

    def __init__(self, error: Exception) -> None:
        self._error = error

    def save(self, book: Book) -> Book:
        raise self._error

    def find_all(self) -> list[Book]:
        raise self._error

    def find_by_id(self, book_id: int) -> Book | None:
        raise self._error

    def delete_by_id(self, book_id: int) -> None:
        raise self._error


class TestStoreErrors:
    def test_store_error_is_server_error(self, test_config: ConfigData, gatsby):
        app = create_app(
            config=test_config,
            book_store=FailingBookStore(BookStoreError("connection lost")),
        )
        with TestClient(app) as client:
            assert client.get("/books").status_code == 500
            assert client.get("/books/1").status_code == 500
            assert client.post("/books", json=gatsby).status_code == 500
            assert client.put("/books/1", json=gatsby).status_code == 500
            response = client.delete("/books/1")

        assert response.status_code == 500
        assert response.json() == {"detail": "Internal Server Error"}

    def test_unexpected_error_is_server_error(self, test_config: ConfigData):
        app = create_app(
            config=test_config,
            book_store=FailingBookStore(RuntimeError("boom")),
        )
        with TestClient(app) as client:
            response = client.get("/books", headers={"X-Request-ID": "req-123"})

        assert response.status_code == 500
        assert response.json()["detail"] == "Internal Server Error"
        assert response.json()["request_id"] == "req-123"


class TestInMemoryStoreApp:
    """The handlers work unchanged over a substituted store."""

    def test_crud_round(self, memory_client: TestClient, memory_repo: InMemoryBookRepository, gatsby):
        saved = memory_client.post("/books", json=gatsby).json()
        assert saved["id"] == 1
        assert memory_repo.find_by_id(1).title == "The Great Gatsby"

        memory_client.put("/books/1", json={**gatsby, "title": "Gatsby"})
        assert memory_client.get("/books/1").json()["title"] == "Gatsby"

        memory_client.delete("/books/1")
        assert memory_client.get("/books/1").status_code == 404
        assert memory_repo.find_all() == []


class TestResponseHeaders:
    def test_request_id_is_generated(self, client: TestClient):
        response = client.get("/books")

        assert response.headers["X-Request-ID"]

    def test_request_id_is_echoed(self, client: TestClient):
        response = client.get("/books", headers={"X-Request-ID": "abc-123"})

        assert response.headers["X-Request-ID"] == "abc-123"

    def test_security_headers(self, client: TestClient):
        response = client.get("/books")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"


@pytest.mark.parametrize("path", ["/docs", "/openapi.json"])
def test_docs_available_outside_production(client: TestClient, path: str):
    assert client.get(path).status_code == 200
