"""HTTP surface of the Lending Catalog: router, handlers and WSGI app."""

from .app import LendingApplication, create_app
from .handlers import BookHandlers, InvalidBookId, parse_book_id
from .router import Route, RouteMatch, Router, RouteTemplateError

__all__ = [
    "BookHandlers",
    "InvalidBookId",
    "LendingApplication",
    "Route",
    "RouteMatch",
    "RouteTemplateError",
    "Router",
    "create_app",
    "parse_book_id",
]
