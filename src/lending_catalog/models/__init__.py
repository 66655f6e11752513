"""
Lending Catalog Models.

Pydantic models for the entities that cross layer boundaries:

- Book: catalog identity (id, title, author)
- BookView: a book plus its derived lending state
- BorrowRecord: one lending episode
"""

from .book import Book, BookView
from .borrow import BorrowRecord

__all__ = [
    "Book",
    "BookView",
    "BorrowRecord",
]
