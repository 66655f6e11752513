"""Book resource handlers.

Thin adapters between the router and the lending service:

1. Parse the ``{id}`` path parameter into a book identifier
2. Call the matching :class:`LendingService` operation
3. Map the result into the JSON envelope and status code

This is the only place lending failures become HTTP statuses:

    NOT_FOUND      -> 404
    NOT_AVAILABLE  -> 400
    NOT_BORROWED   -> 400

Store faults are not caught here; they reach the router, which answers 500.

IDENTIFIER GRAMMAR:
The raw segment must be ASCII digits only, otherwise the request is a client
error (400) rather than being truncated to a leading number. Digit strings
that are not a canonical positive id (``0``, leading zeros, values past the
64-bit range) cannot name a stored book and are answered as not found.
"""

import logging
import re
from typing import Any

from werkzeug.wrappers import Response

from ..services.lending import FailureKind, LendingResult, LendingService
from . import responses
from .router import Router

logger = logging.getLogger(__name__)

MAX_BOOK_ID = 2**63 - 1

_DIGITS = re.compile(r"\A[0-9]+\Z")

FAILURE_STATUS: dict[FailureKind, int] = {
    FailureKind.NOT_FOUND: 404,
    FailureKind.NOT_AVAILABLE: 400,
    FailureKind.NOT_BORROWED: 400,
}


class InvalidBookId(ValueError):
    """Raised when a path parameter is not a decimal book identifier."""

    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(f"Invalid book ID '{raw}'")


def parse_book_id(raw: str) -> int | None:
    """Parse a path segment into a book id.

    Returns:
        The id, or None when the digits are not a canonical positive id

    Raises:
        InvalidBookId: If the segment is not made of ASCII digits
    """
    if not _DIGITS.match(raw):
        raise InvalidBookId(raw)
    if raw.startswith("0"):
        return None
    value = int(raw)
    if value > MAX_BOOK_ID:
        return None
    return value


class BookHandlers:
    """HTTP handlers for the ``/books`` resource."""

    def __init__(self, service: LendingService):
        self.service = service

    def register(self, router: Router) -> None:
        """Register the book routes on ``router``."""
        router.get("/books", self.index)
        router.get("/books/{id}", self.show)
        router.post("/books/{id}/borrow", self.borrow)
        router.post("/books/{id}/return", self.return_book)

    def index(self, params: dict[str, str]) -> Response:  # noqa: ARG002
        """GET /books"""
        books = self.service.get_all()
        return responses.success({"books": [book.to_payload() for book in books]})

    def show(self, params: dict[str, str]) -> Response:
        """GET /books/{id}"""
        return self._with_book_id(params, self.service.get_by_id)

    def borrow(self, params: dict[str, str]) -> Response:
        """POST /books/{id}/borrow"""
        return self._with_book_id(
            params, self.service.borrow, message="Book borrowed successfully"
        )

    def return_book(self, params: dict[str, str]) -> Response:
        """POST /books/{id}/return"""
        return self._with_book_id(
            params, self.service.return_book, message="Book returned successfully"
        )

    def _with_book_id(self, params, operation, message: str | None = None) -> Response:
        raw = params["id"]
        try:
            book_id = parse_book_id(raw)
        except InvalidBookId as e:
            logger.info("Rejected book identifier %r", raw)
            return responses.error(str(e), 400)

        if book_id is None:
            return responses.not_found(f"Book with ID {raw} not found")

        return self._render(operation(book_id), message)

    @staticmethod
    def _render(result: LendingResult, message: str | None) -> Response:
        if not result.ok:
            failure = result.failure
            return responses.error(failure.message, FAILURE_STATUS[failure.kind])

        data: dict[str, Any] = {"book": result.book.to_payload()}
        if message is not None:
            data["message"] = message
        return responses.success(data)
