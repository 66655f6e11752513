"""Domain services for the Lending Catalog."""

from .lending import FailureKind, LendingFailure, LendingResult, LendingService

__all__ = [
    "FailureKind",
    "LendingFailure",
    "LendingResult",
    "LendingService",
]
