"""
Book models for the Lending Catalog.

Two shapes of a book travel through the service:

- ``Book``: catalog identity only (id, title, author), as stored
- ``BookView``: the derived projection returned over HTTP, adding the
  current lending state computed from the book's open borrow record

``BookView`` is never persisted. ``available`` and ``borrowed_at`` always
agree: an available book has no ``borrowed_at`` and a borrowed one has it.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Book(BaseModel):
    """
    Represents a book in the lending catalog.

    Books are created when the catalog is seeded and are only read by
    lending operations.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(
        ...,
        description="Store-assigned book identifier",
        ge=1,
        examples=[1, 42],
    )

    title: str = Field(
        ...,
        description="The title of the book",
        min_length=1,
        max_length=255,
        examples=["Clean Code", "Design Patterns"],
    )

    author: str = Field(
        ...,
        description="The book's author or authors",
        min_length=1,
        max_length=255,
        examples=["Robert C. Martin", "Gang of Four"],
    )

    @field_validator("title", "author")
    @classmethod
    def reject_blank(cls, v: str) -> str:
        """Whitespace-only titles and authors are treated as empty."""
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class BookView(BaseModel):
    """
    A book together with its current lending state.

    ``available`` is true exactly when the book has no open borrow record;
    ``borrowed_at`` is the open record's borrow timestamp.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "title": "Clean Code",
                "author": "Robert C. Martin",
                "available": False,
                "borrowed_at": "2025-11-26T10:15:00",
            }
        },
    )

    id: int = Field(..., description="Book identifier", ge=1)
    title: str = Field(..., description="The title of the book")
    author: str = Field(..., description="The book's author")
    available: bool = Field(..., description="Whether the book can be borrowed now")
    borrowed_at: datetime | None = Field(
        None,
        description="When the current borrow started; null when available",
    )

    @model_validator(mode="after")
    def validate_lending_state(self) -> "BookView":
        """Availability and borrow timestamp must describe the same state."""
        if self.available and self.borrowed_at is not None:
            raise ValueError("An available book cannot have a borrow timestamp")
        if not self.available and self.borrowed_at is None:
            raise ValueError("A borrowed book must have a borrow timestamp")
        return self

    @classmethod
    def from_row(cls, book: Any, borrowed_at: datetime | None) -> "BookView":
        """Build a view from a book row and its open record's timestamp."""
        return cls(
            id=book.id,
            title=book.title,
            author=book.author,
            available=borrowed_at is None,
            borrowed_at=borrowed_at,
        )

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON-ready wire shape."""
        return self.model_dump(mode="json")
