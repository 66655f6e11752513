"""
Lending service for the Lending Catalog.

Each book is in one of two logical states, derived from its borrow records:

    Available --borrow--> Borrowed --return--> Available

The service applies the domain rules (the book must exist; it must be
available to borrow and borrowed to return) on top of the catalog store.
The store's conditional transition is the authority on whether a borrow or
return happened. The existence lookup done here first only lets the
service name a missing book precisely; it never decides availability.

Domain failures are returned as a tagged :class:`LendingResult`, not raised.
Only store faults (:class:`~lending_catalog.database.StoreError`) propagate
as exceptions.
"""

import enum
import logging

from pydantic import BaseModel, Field, model_validator

from ..database.catalog_store import BorrowOutcome, CatalogStore, ReturnOutcome
from ..models.book import BookView

logger = logging.getLogger(__name__)


class FailureKind(str, enum.Enum):
    """Why a lending operation did not succeed."""

    NOT_FOUND = "not_found"
    NOT_AVAILABLE = "not_available"
    NOT_BORROWED = "not_borrowed"


_FAILURE_MESSAGES = {
    FailureKind.NOT_FOUND: "Book with ID {book_id} not found",
    FailureKind.NOT_AVAILABLE: "Book with ID {book_id} is not available for borrowing",
    FailureKind.NOT_BORROWED: "Book with ID {book_id} is not currently borrowed",
}


class LendingFailure(BaseModel):
    """A domain-level failure naming the offending book."""

    kind: FailureKind
    book_id: int

    @property
    def message(self) -> str:
        """Human-readable description including the book id."""
        return _FAILURE_MESSAGES[self.kind].format(book_id=self.book_id)


class LendingResult(BaseModel):
    """Outcome of a single-book operation: a view on success, a failure otherwise."""

    book: BookView | None = Field(default=None, description="Book state after the operation")
    failure: LendingFailure | None = Field(default=None, description="Why the operation failed")

    @model_validator(mode="after")
    def validate_exclusive(self) -> "LendingResult":
        if (self.book is None) == (self.failure is None):
            raise ValueError("A lending result carries either a book or a failure")
        return self

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, book: BookView) -> "LendingResult":
        return cls(book=book)

    @classmethod
    def fail(cls, kind: FailureKind, book_id: int) -> "LendingResult":
        return cls(failure=LendingFailure(kind=kind, book_id=book_id))


class LendingService:
    """
    Domain operations over the catalog.

    The store is injected at construction; the service holds no other
    state and can be shared across request threads.
    """

    def __init__(self, store: CatalogStore):
        self.store = store

    def get_all(self) -> list[BookView]:
        """All books with their lending state, ordered by id."""
        return self.store.list_books()

    def get_by_id(self, book_id: int) -> LendingResult:
        """One book with its lending state, or NOT_FOUND."""
        view = self.store.find_book_view(book_id)
        if view is None:
            return LendingResult.fail(FailureKind.NOT_FOUND, book_id)
        return LendingResult.success(view)

    def borrow(self, book_id: int) -> LendingResult:
        """
        Borrow a book.

        Business rules:
        - Book must exist (NOT_FOUND)
        - Book must have no open borrow record (NOT_AVAILABLE)

        On success the view is re-read, so it carries the new borrow timestamp.
        """
        if self.store.find_book(book_id) is None:
            return LendingResult.fail(FailureKind.NOT_FOUND, book_id)

        outcome = self.store.try_borrow(book_id)

        if outcome is BorrowOutcome.ALREADY_BORROWED:
            return LendingResult.fail(FailureKind.NOT_AVAILABLE, book_id)
        if outcome is BorrowOutcome.BOOK_MISSING:
            return LendingResult.fail(FailureKind.NOT_FOUND, book_id)

        return self._reread(book_id)

    def return_book(self, book_id: int) -> LendingResult:
        """
        Return a borrowed book.

        Business rules:
        - Book must exist (NOT_FOUND)
        - Book must have an open borrow record (NOT_BORROWED)
        """
        if self.store.find_book(book_id) is None:
            return LendingResult.fail(FailureKind.NOT_FOUND, book_id)

        outcome = self.store.try_return(book_id)

        if outcome is ReturnOutcome.NOT_CURRENTLY_BORROWED:
            return LendingResult.fail(FailureKind.NOT_BORROWED, book_id)
        if outcome is ReturnOutcome.BOOK_MISSING:
            return LendingResult.fail(FailureKind.NOT_FOUND, book_id)

        return self._reread(book_id)

    def _reread(self, book_id: int) -> LendingResult:
        view = self.store.find_book_view(book_id)
        if view is None:
            logger.warning("Book %d disappeared after a lending transition", book_id)
            return LendingResult.fail(FailureKind.NOT_FOUND, book_id)
        return LendingResult.success(view)
