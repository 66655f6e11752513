"""Tests for catalog seeding."""

import pytest
from pydantic import ValidationError

from lending_catalog.database import (
    DEFAULT_CATALOG,
    CatalogEntry,
    CatalogStore,
    seed_catalog,
    seed_if_empty,
)


class TestSeedCatalog:
    def test_default_catalog(self, db_manager):
        books = seed_catalog(db_manager)

        assert [book.title for book in books] == [entry.title for entry in DEFAULT_CATALOG]
        assert [book.id for book in books] == list(range(1, len(DEFAULT_CATALOG) + 1))
        assert all(book.available for book in books)

    def test_reset_restarts_ids(self, db_manager):
        seed_catalog(db_manager)
        CatalogStore(db_manager).try_borrow(1)

        books = seed_catalog(
            db_manager,
            [CatalogEntry(title="Refactoring", author="Martin Fowler")],
            reset=True,
        )

        assert [(book.id, book.title) for book in books] == [(1, "Refactoring")]
        assert books[0].available

    def test_without_reset_appends(self, seeded_manager):
        books = seed_catalog(
            seeded_manager, [CatalogEntry(title="Refactoring", author="Martin Fowler")]
        )

        assert [book.id for book in books] == [1, 2, 3, 4]

    def test_entry_validation(self):
        with pytest.raises(ValidationError):
            CatalogEntry(title="", author="Nobody")


class TestSeedIfEmpty:
    def test_seeds_empty_database(self, db_manager):
        assert seed_if_empty(db_manager) is True
        assert len(CatalogStore(db_manager).list_books()) == len(DEFAULT_CATALOG)

    def test_leaves_existing_catalog(self, seeded_manager):
        assert seed_if_empty(seeded_manager) is False
        assert len(CatalogStore(seeded_manager).list_books()) == 3
