"""
Catalog store for the Lending Catalog.

The store is the only component that touches the database. It exposes
read operations over the catalog and two state transitions:

1. **Borrow**: open a borrow record for a book that has none
2. **Return**: close the open borrow record of a book

Both transitions are a single conditional statement, so the availability
check and the write cannot be separated by a concurrent caller:

- borrow is ``INSERT ... SELECT ... WHERE book exists AND no open record``
- return is ``UPDATE ... SET returned_at = now WHERE returned_at IS NULL``, with
  ``returned_at`` never earlier than the record's ``borrowed_at``

The partial unique index on open records backs the borrow statement up on
databases where two conditional inserts can run side by side; the loser sees
a constraint violation and reports ``ALREADY_BORROWED``.

Domain outcomes are returned as enum values. Only database faults raise,
as :class:`StoreError`.
"""

import enum
import logging
from collections.abc import Generator
from contextlib import contextmanager
from datetime import UTC, datetime

from sqlalchemy import DateTime, Integer, and_, case, func, insert, literal, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.book import Book, BookView
from ..models.borrow import BorrowRecord
from .schema import Book as BookDB
from .schema import BorrowRecord as BorrowRecordDB
from .session import DatabaseManager

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Base exception for catalog persistence."""


class StoreError(CatalogError):
    """Raised when the database cannot complete a catalog operation."""


class BorrowOutcome(str, enum.Enum):
    """Result of an attempted borrow transition."""

    BORROWED = "borrowed"
    ALREADY_BORROWED = "already_borrowed"
    BOOK_MISSING = "book_missing"


class ReturnOutcome(str, enum.Enum):
    """Result of an attempted return transition."""

    RETURNED = "returned"
    NOT_CURRENTLY_BORROWED = "not_currently_borrowed"
    BOOK_MISSING = "book_missing"


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the form stored in the database."""
    return datetime.now(UTC).replace(tzinfo=None)


class CatalogStore:
    """
    Persistence for books and borrow records.

    One store is created at startup around an explicitly constructed
    :class:`DatabaseManager` and shared by all requests. Every method opens
    its own session, so concurrent callers never share a transaction.
    """

    def __init__(self, manager: DatabaseManager):
        self.manager = manager

    # =========================================================================
    # Reads
    # =========================================================================

    def find_book(self, book_id: int) -> Book | None:
        """Look up a book's catalog identity."""
        with self._transaction("find book") as session:
            row = session.execute(
                select(BookDB).where(BookDB.id == book_id)
            ).scalar_one_or_none()
            return Book.model_validate(row) if row is not None else None

    def list_books(self) -> list[BookView]:
        """
        List every book with its lending state, ordered by id.

        Each book is joined with its (at most one) open borrow record in a
        single query.
        """
        with self._transaction("list books") as session:
            rows = session.execute(self._view_query().order_by(BookDB.id.asc())).all()
            return [BookView.from_row(book, borrowed_at) for book, borrowed_at in rows]

    def find_book_view(self, book_id: int) -> BookView | None:
        """Look up one book with its lending state."""
        with self._transaction("find book view") as session:
            row = session.execute(self._view_query().where(BookDB.id == book_id)).first()
            if row is None:
                return None
            book, borrowed_at = row
            return BookView.from_row(book, borrowed_at)

    def count_open_records(self, book_id: int) -> int:
        """Number of open borrow records for a book (0 or 1 when consistent)."""
        with self._transaction("count open records") as session:
            return session.execute(
                select(func.count())
                .select_from(BorrowRecordDB)
                .where(
                    and_(
                        BorrowRecordDB.book_id == book_id,
                        BorrowRecordDB.returned_at.is_(None),
                    )
                )
            ).scalar_one()

    def borrow_history(self, book_id: int) -> list[BorrowRecord]:
        """All borrow records of a book, oldest first."""
        with self._transaction("borrow history") as session:
            rows = session.execute(
                select(BorrowRecordDB)
                .where(BorrowRecordDB.book_id == book_id)
                .order_by(BorrowRecordDB.id.asc())
            ).scalars()
            return [BorrowRecord.model_validate(row) for row in rows]

    # =========================================================================
    # Transitions
    # =========================================================================

    def try_borrow(self, book_id: int) -> BorrowOutcome:
        """
        Open a borrow record for ``book_id`` if it has none.

        The existence check, the availability check and the insert are one
        statement. When it inserts nothing, the book is inspected afterwards
        only to tell ``BOOK_MISSING`` apart from ``ALREADY_BORROWED``.

        The borrow time is read once the transaction holds the write lock,
        so it is never earlier than a return committed while this call waited.

        Returns:
            BORROWED, ALREADY_BORROWED or BOOK_MISSING

        Raises:
            StoreError: On database failure
        """
        with self._transaction("borrow") as session:
            session.connection()
            borrowed_at = utcnow()

            try:
                inserted = session.execute(self._borrow_statement(book_id, borrowed_at)).rowcount
            except IntegrityError as e:
                # A concurrent borrow committed first; the open-record index rejected ours
                session.rollback()
                if self._has_open_record(session, book_id):
                    logger.info("Borrow of book %d lost a race to a concurrent borrow", book_id)
                    return BorrowOutcome.ALREADY_BORROWED
                raise StoreError(f"Borrow of book {book_id} violated a constraint") from e

            if inserted == 1:
                logger.info("Book %d borrowed at %s", book_id, borrowed_at.isoformat())
                return BorrowOutcome.BORROWED

            if self._book_exists(session, book_id):
                logger.info("Borrow rejected - book %d is already borrowed", book_id)
                return BorrowOutcome.ALREADY_BORROWED

            logger.info("Borrow rejected - book %d does not exist", book_id)
            return BorrowOutcome.BOOK_MISSING

    def try_return(self, book_id: int) -> ReturnOutcome:
        """
        Close the open borrow record of ``book_id``.

        A conditional update; if a concurrent return closed the record
        first, this call updates zero rows and reports
        ``NOT_CURRENTLY_BORROWED``.

        The return time is read once the transaction holds the write lock and
        is never set earlier than the record's ``borrowed_at``, so a borrow
        committed while this call waited is closed rather than rejected by
        the date check.

        Returns:
            RETURNED, NOT_CURRENTLY_BORROWED or BOOK_MISSING

        Raises:
            StoreError: On database failure
        """
        with self._transaction("return") as session:
            session.connection()
            returned_at = utcnow()

            updated = session.execute(self._return_statement(book_id, returned_at)).rowcount

            if updated == 1:
                logger.info("Book %d returned at %s", book_id, returned_at.isoformat())
                return ReturnOutcome.RETURNED

            if updated > 1:
                # Unreachable while the open-record index exists
                raise StoreError(f"Book {book_id} had {updated} open borrow records")

            if self._book_exists(session, book_id):
                logger.info("Return rejected - book %d is not currently borrowed", book_id)
                return ReturnOutcome.NOT_CURRENTLY_BORROWED

            logger.info("Return rejected - book %d does not exist", book_id)
            return ReturnOutcome.BOOK_MISSING

    # =========================================================================
    # Catalog seeding
    # =========================================================================

    def add_book(self, title: str, author: str) -> Book:
        """
        Insert a book into the catalog.

        Only used when seeding; the HTTP surface has no book creation.

        Raises:
            ValueError: If title or author is blank
            StoreError: On database failure
        """
        with self._transaction("add book") as session:
            row = BookDB(title=title, author=author)
            session.add(row)
            session.flush()
            logger.debug("Added book %d: %s", row.id, title)
            return Book.model_validate(row)

    # =========================================================================
    # Helpers
    # =========================================================================

    @contextmanager
    def _transaction(self, operation: str) -> Generator[Session, None, None]:
        """Run one store operation in its own transaction.

        Database errors are converted to :class:`StoreError`; everything
        else propagates unchanged.
        """
        try:
            with self.manager.session_scope() as session:
                yield session
        except SQLAlchemyError as e:
            logger.exception("Catalog store operation '%s' failed", operation)
            raise StoreError(f"Database operation '{operation}' failed") from e

    @staticmethod
    def _borrow_statement(book_id: int, borrowed_at: datetime):
        """INSERT ... SELECT that adds an open record only for an existing, available book."""
        book_exists = select(BookDB.id).where(BookDB.id == book_id).correlate(None).exists()
        open_exists = (
            select(BorrowRecordDB.id)
            .where(
                and_(
                    BorrowRecordDB.book_id == book_id,
                    BorrowRecordDB.returned_at.is_(None),
                )
            )
            .correlate(None)
            .exists()
        )
        return insert(BorrowRecordDB.__table__).from_select(
            ["book_id", "borrowed_at"],
            select(literal(book_id, Integer), literal(borrowed_at, DateTime)).where(
                and_(book_exists, ~open_exists)
            ),
        )

    @staticmethod
    def _return_statement(book_id: int, returned_at: datetime):
        """UPDATE that closes the open record, never before it was borrowed."""
        return (
            update(BorrowRecordDB)
            .where(
                and_(
                    BorrowRecordDB.book_id == book_id,
                    BorrowRecordDB.returned_at.is_(None),
                )
            )
            .values(
                returned_at=case(
                    (
                        BorrowRecordDB.borrowed_at > literal(returned_at, DateTime),
                        BorrowRecordDB.borrowed_at,
                    ),
                    else_=literal(returned_at, DateTime),
                )
            )
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    def _view_query():
        """Books left-joined with their open borrow record."""
        return select(BookDB, BorrowRecordDB.borrowed_at).outerjoin(
            BorrowRecordDB,
            and_(
                BorrowRecordDB.book_id == BookDB.id,
                BorrowRecordDB.returned_at.is_(None),
            ),
        )

    @staticmethod
    def _book_exists(session: Session, book_id: int) -> bool:
        return session.execute(select(BookDB.id).where(BookDB.id == book_id)).first() is not None

    @staticmethod
    def _has_open_record(session: Session, book_id: int) -> bool:
        return (
            session.execute(
                select(BorrowRecordDB.id).where(
                    and_(
                        BorrowRecordDB.book_id == book_id,
                        BorrowRecordDB.returned_at.is_(None),
                    )
                )
            ).first()
            is not None
        )
