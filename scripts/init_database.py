#!/usr/bin/env python3
"""
Initialize the Lending Catalog database.

This script:
1. Creates all database tables
2. Optionally loads the sample catalog
3. Verifies the database is ready for the HTTP server

Usage:
    python scripts/init_database.py [--drop-existing] [--sample-data] [--database-url URL]
"""

import argparse
import logging
import sys

from sqlalchemy import inspect

from lending_catalog.config import get_config
from lending_catalog.database import CatalogStore, DatabaseManager, seed_catalog

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

EXPECTED_TABLES = {"books", "borrow_records"}


def main():
    """Main entry point for database initialization."""
    parser = argparse.ArgumentParser(description="Initialize the Lending Catalog database")
    parser.add_argument(
        "--drop-existing",
        action="store_true",
        help="Drop existing tables before creating new ones",
    )
    parser.add_argument(
        "--sample-data",
        action="store_true",
        help="Load the sample catalog after creating tables",
    )
    parser.add_argument(
        "--database-url",
        help="Override the configured database URL",
    )

    args = parser.parse_args()

    config = get_config()
    manager = DatabaseManager(
        args.database_url or config.get_database_url(),
        sqlite_busy_timeout=config.sqlite_busy_timeout,
    )

    if not manager.verify_connection():
        logger.error("Failed to connect to database")
        sys.exit(1)

    try:
        if args.sample_data:
            books = seed_catalog(manager, reset=args.drop_existing)
            logger.info("Loaded %d sample books", len(books))
        else:
            manager.init_database(drop_existing=args.drop_existing)

        tables = set(inspect(manager.engine).get_table_names())
        logger.info("Tables: %s", ", ".join(sorted(tables)))

        missing_tables = EXPECTED_TABLES - tables
        if missing_tables:
            logger.error("Missing expected tables: %s", missing_tables)
            sys.exit(1)

        for book in CatalogStore(manager).list_books():
            logger.info("  #%d %s - %s", book.id, book.title, book.author)

        logger.info("Database initialization complete")

    except Exception:
        logger.exception("Database initialization failed")
        sys.exit(1)
    finally:
        manager.close()


if __name__ == "__main__":
    main()
