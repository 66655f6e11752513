"""Lending Catalog - HTTP server entry point.

Starts the book lending API:

- GET  /books               - catalog with availability
- GET  /books/{id}          - one book
- POST /books/{id}/borrow   - borrow a book
- POST /books/{id}/return   - return a book

Requests are served thread-per-request by the Werkzeug server. All
threads share one application and one database engine; the borrow/return
atomicity lives in the database, so running several processes against the
same database is equally safe.
"""

import logging
import signal
import sys
from typing import Any

from werkzeug.serving import run_simple

from .config import CatalogConfig, get_config
from .database.seed import seed_if_empty
from .database.session import DatabaseManager
from .http.app import create_app
from .observability import initialize_observability

logger = logging.getLogger(__name__)


def configure_logging(config: CatalogConfig) -> None:
    """Send log records to stderr at the configured level."""
    level = logging.DEBUG if config.debug else getattr(logging, config.log_level)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    if not config.is_development:
        # Werkzeug logs every request itself; the app already does
        logging.getLogger("werkzeug").setLevel(logging.WARNING)


def main() -> None:
    """Main entry point, installed as the ``lending-catalog`` command."""
    config = get_config()
    configure_logging(config)
    initialize_observability(config)

    logger.info("=" * 60)
    logger.info("Lending Catalog")
    logger.info("Version: %s", config.service_version)
    logger.info("Environment: %s", config.environment)
    logger.info("Debug Mode: %s", config.debug)
    logger.info("=" * 60)

    manager = DatabaseManager(
        config.get_database_url(),
        sqlite_busy_timeout=config.sqlite_busy_timeout,
    )
    if not manager.verify_connection():
        logger.error("Failed to connect to database")
        sys.exit(1)

    if config.seed_on_startup and seed_if_empty(manager):
        logger.info("Loaded the sample catalog")

    app = create_app(config, manager)

    def signal_handler(signum: int, _frame: Any) -> None:
        logger.info("Received signal %s, initiating shutdown...", signum)
        app.close()
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    logger.info("Serving on http://%s:%d", config.http_host, config.http_port)
    try:
        run_simple(
            config.http_host,
            config.http_port,
            app,
            threaded=True,
            use_reloader=False,
        )
    except Exception:
        logger.exception("Fatal error in HTTP server")
        app.close()
        sys.exit(1)


if __name__ == "__main__":
    main()
