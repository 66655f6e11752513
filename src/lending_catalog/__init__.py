"""
Lending Catalog Package.

A small HTTP resource API over a book lending catalog: list books, fetch
one, borrow it, return it.

Key Components:
- config: Configuration management with Pydantic v2
- database: SQLAlchemy schema, sessions and the catalog store
- models: Pydantic models for books and borrow records
- services: The lending rules (Available <-> Borrowed)
- http: Request router, resource handlers and the WSGI app
"""

__version__ = "0.1.0"

from .http.app import create_app

__all__ = [
    "__version__",
    "create_app",
]
