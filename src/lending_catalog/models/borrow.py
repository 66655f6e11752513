"""
Borrow record model for the Lending Catalog.

A borrow record is one lending episode of one book. It is opened by a
successful borrow and closed by a successful return; it is never deleted.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator


class BorrowRecord(BaseModel):
    """Represents a single borrow of a book."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Record identifier", ge=1)

    book_id: int = Field(..., description="ID of the borrowed book", ge=1)

    borrowed_at: datetime = Field(
        ...,
        description="Date and time when the book was borrowed",
    )

    returned_at: datetime | None = Field(
        None,
        description="Date and time when the book was returned; null while open",
    )

    @model_validator(mode="after")
    def validate_dates(self) -> "BorrowRecord":
        if self.returned_at is not None and self.returned_at < self.borrowed_at:
            raise ValueError("Return date cannot be before borrow date")
        return self

    @property
    def is_open(self) -> bool:
        """Check if the book is still out on this record."""
        return self.returned_at is None
