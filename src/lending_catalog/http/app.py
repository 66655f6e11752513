"""WSGI application for the Lending Catalog.

``create_app`` wires the components explicitly, leaf first:

    DatabaseManager -> CatalogStore -> LendingService -> BookHandlers -> Router

The resulting :class:`LendingApplication` is a plain WSGI callable, so it
runs under the development server in :mod:`lending_catalog.server` or any
WSGI container. Components are stateless apart from the database engine,
which is safe to share across request threads.
"""

import logging

from werkzeug.wrappers import Request, Response

from ..config import CatalogConfig, get_config
from ..database.catalog_store import CatalogStore
from ..database.session import DatabaseManager
from ..observability import record_response, request_span
from ..services.lending import LendingService
from .handlers import BookHandlers
from .router import Router

logger = logging.getLogger(__name__)


class LendingApplication:
    """Routes WSGI requests through the router and traces each one."""

    def __init__(self, router: Router, manager: DatabaseManager | None = None):
        self.router = router
        self.manager = manager

    def handle(self, method: str, path: str) -> Response:
        """Dispatch one request and return its response."""
        with request_span(method, path) as span:
            response = self.router.dispatch(method, path)
            record_response(span, response)

        logger.info("%s %s -> %d", method, path, response.status_code)
        return response

    def wsgi_app(self, environ, start_response):
        request = Request(environ)
        response = self.handle(request.method, request.path)
        return response(environ, start_response)

    def __call__(self, environ, start_response):
        return self.wsgi_app(environ, start_response)

    def close(self) -> None:
        """Release the database engine."""
        if self.manager is not None:
            self.manager.close()


def create_app(
    config: CatalogConfig | None = None,
    manager: DatabaseManager | None = None,
) -> LendingApplication:
    """
    Build a ready-to-serve application.

    Args:
        config: Service configuration; the process configuration if omitted
        manager: Database to use; built from ``config`` if omitted

    Returns:
        The WSGI application. The schema is created if missing.
    """
    config = config or get_config()
    if manager is None:
        manager = DatabaseManager(
            config.get_database_url(),
            sqlite_busy_timeout=config.sqlite_busy_timeout,
        )
    manager.init_database()

    service = LendingService(CatalogStore(manager))
    router = Router()
    BookHandlers(service).register(router)

    logger.info("Registered %d routes", len(router.routes))
    return LendingApplication(router, manager)
