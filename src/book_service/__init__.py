"""Book Service: CRUD REST API for book records."""

__version__ = "1.0.0"
