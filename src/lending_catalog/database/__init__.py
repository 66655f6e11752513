"""
Database package for the Lending Catalog.

This package provides:
- SQLAlchemy schema definitions (schema.py)
- Engine and session management (session.py)
- The catalog store with atomic borrow/return transitions (catalog_store.py)
- Catalog seeding (seed.py)
"""

from .catalog_store import (
    BorrowOutcome,
    CatalogError,
    CatalogStore,
    ReturnOutcome,
    StoreError,
)
from .schema import OPEN_BORROW_INDEX, Base, Book, BorrowRecord
from .seed import DEFAULT_CATALOG, CatalogEntry, seed_catalog, seed_if_empty
from .session import DatabaseManager

__all__ = [
    "DEFAULT_CATALOG",
    "OPEN_BORROW_INDEX",
    "Base",
    "Book",
    "BorrowOutcome",
    "BorrowRecord",
    "CatalogEntry",
    "CatalogError",
    "CatalogStore",
    "DatabaseManager",
    "ReturnOutcome",
    "StoreError",
    "seed_catalog",
    "seed_if_empty",
]
