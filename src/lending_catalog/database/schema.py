"""
SQLAlchemy database schema for the Lending Catalog.

Two record sets back the catalog:

1. ``books`` - the catalog itself. Rows are written at seeding time and only
   read by lending operations.
2. ``borrow_records`` - one row per lending episode. A row with
   ``returned_at IS NULL`` is an open borrow; closing it sets ``returned_at``.
   Rows are never deleted, so the table is the borrow history.

A book's availability is derived: it is available exactly when it has no open
borrow record. The partial unique index ``uq_borrow_records_open_book`` makes
"at most one open record per book" a database constraint, so concurrent
writers cannot both open a record for the same book.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    text,
)
from sqlalchemy.orm import declarative_base, relationship, validates
from sqlalchemy.sql import func

# Base class for all SQLAlchemy models
Base = declarative_base()

OPEN_BORROW_INDEX = "uq_borrow_records_open_book"


class Book(Base):
    """
    Books table - the lending catalog.

    Usage:
    - Read by GET /books and GET /books/{id}
    - Referenced by borrow records; never mutated by borrow or return
    """

    __tablename__ = "books"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    author = Column(String(255), nullable=False)

    created_at = Column(DateTime, nullable=False, default=func.now())

    # Relationships
    borrow_records = relationship(
        "BorrowRecord", back_populates="book", order_by="BorrowRecord.id"
    )

    __table_args__ = (
        Index("idx_book_title", "title"),
        Index("idx_book_author", "author"),
        CheckConstraint("length(title) > 0", name="check_book_title_not_empty"),
        CheckConstraint("length(author) > 0", name="check_book_author_not_empty"),
    )

    @validates("title", "author")
    def validate_not_blank(self, key, value):
        """Reject blank titles and authors before they reach the database."""
        if value is None or not value.strip():
            raise ValueError(f"Book {key} must not be empty")
        return value


class BorrowRecord(Base):
    """
    Borrow records table - one lending episode per row.

    Usage:
    - POST /books/{id}/borrow inserts an open record
    - POST /books/{id}/return closes the open record
    - The open record (if any) supplies a book's ``borrowed_at``
    """

    __tablename__ = "borrow_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    book_id = Column(Integer, ForeignKey("books.id"), nullable=False)
    borrowed_at = Column(DateTime, nullable=False, default=func.now())
    returned_at = Column(DateTime, nullable=True)

    # Relationships
    book = relationship("Book", back_populates="borrow_records")

    __table_args__ = (
        Index("idx_borrow_book", "book_id"),
        Index("idx_borrow_borrowed_at", "borrowed_at"),
        # One open record per book
        Index(
            OPEN_BORROW_INDEX,
            "book_id",
            unique=True,
            sqlite_where=text("returned_at IS NULL"),
            postgresql_where=text("returned_at IS NULL"),
        ),
        CheckConstraint(
            "returned_at IS NULL OR returned_at >= borrowed_at",
            name="check_returned_after_borrowed",
        ),
    )

    @property
    def is_open(self) -> bool:
        """Check if this record represents a book currently checked out."""
        return self.returned_at is None
