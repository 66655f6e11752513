"""
Catalog seeding for the Lending Catalog.

Books enter the catalog only here: there is no HTTP endpoint that creates
them. ``DEFAULT_CATALOG`` is the sample catalog shipped with the service.
"""

import logging
from collections.abc import Iterable

from pydantic import BaseModel, Field

from ..models.book import BookView
from .catalog_store import CatalogStore
from .session import DatabaseManager

logger = logging.getLogger(__name__)


class CatalogEntry(BaseModel):
    """A book to be added to the catalog."""

    title: str = Field(..., min_length=1, max_length=255)
    author: str = Field(..., min_length=1, max_length=255)


DEFAULT_CATALOG: tuple[CatalogEntry, ...] = (
    CatalogEntry(title="The PHP Manual", author="PHP Documentation Team"),
    CatalogEntry(title="Clean Code", author="Robert C. Martin"),
    CatalogEntry(title="Design Patterns", author="Gang of Four"),
    CatalogEntry(title="Refactoring", author="Martin Fowler"),
    CatalogEntry(title="The Pragmatic Programmer", author="Andrew Hunt and David Thomas"),
)


def seed_catalog(
    manager: DatabaseManager,
    books: Iterable[CatalogEntry] = DEFAULT_CATALOG,
    reset: bool = False,
) -> list[BookView]:
    """
    Load books into the catalog.

    Args:
        manager: Database to seed
        books: Entries to insert, in id order
        reset: Drop and recreate the schema first so ids start at 1

    Returns:
        Views of the whole catalog after seeding
    """
    manager.init_database(drop_existing=reset)
    store = CatalogStore(manager)

    count = 0
    for entry in books:
        store.add_book(entry.title, entry.author)
        count += 1

    logger.info("Seeded %d books into the catalog", count)
    return store.list_books()


def seed_if_empty(manager: DatabaseManager) -> bool:
    """Seed the default catalog when the database has no books.

    Returns:
        True if the catalog was seeded
    """
    manager.init_database()
    if CatalogStore(manager).list_books():
        return False
    seed_catalog(manager)
    return True
