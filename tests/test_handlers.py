"""
Tests for the book resource handlers.

The service is mocked here so each status mapping is checked in isolation;
end-to-end behaviour against a real database lives in test_api.py.
"""

import json
from datetime import datetime
from unittest.mock import create_autospec

import pytest

from lending_catalog.database import StoreError
from lending_catalog.http.handlers import (
    MAX_BOOK_ID,
    BookHandlers,
    InvalidBookId,
    parse_book_id,
)
from lending_catalog.http.router import Router
from lending_catalog.models import BookView
from lending_catalog.services import FailureKind, LendingResult, LendingService

BORROWED_VIEW = BookView(
    id=1,
    title="Clean Code",
    author="Robert C. Martin",
    available=False,
    borrowed_at=datetime(2025, 11, 26, 10, 15),
)


def body(response):
    return json.loads(response.get_data(as_text=True))


@pytest.fixture
def mock_service():
    return create_autospec(LendingService, instance=True)


@pytest.fixture
def router(mock_service):
    router = Router()
    BookHandlers(mock_service).register(router)
    return router


class TestParseBookId:
    @pytest.mark.parametrize(
        "raw, expected",
        [("1", 1), ("42", 42), (str(MAX_BOOK_ID), MAX_BOOK_ID)],
    )
    def test_canonical_ids(self, raw, expected):
        assert parse_book_id(raw) == expected

    @pytest.mark.parametrize("raw", ["0", "007", "00", str(MAX_BOOK_ID + 1), "9" * 40])
    def test_digits_that_cannot_name_a_book(self, raw):
        assert parse_book_id(raw) is None

    @pytest.mark.parametrize("raw", ["abc", "1a", "-1", "+1", "1.0", " 1", "١٢"])
    def test_non_digits_rejected(self, raw):
        with pytest.raises(InvalidBookId) as exc_info:
            parse_book_id(raw)

        assert exc_info.value.raw == raw
        assert str(exc_info.value) == f"Invalid book ID '{raw}'"


class TestStatusMapping:
    def test_index(self, router, mock_service):
        mock_service.get_all.return_value = [BORROWED_VIEW]

        response = router.dispatch("GET", "/books")

        assert response.status_code == 200
        assert body(response) == {
            "data": {
                "books": [
                    {
                        "id": 1,
                        "title": "Clean Code",
                        "author": "Robert C. Martin",
                        "available": False,
                        "borrowed_at": "2025-11-26T10:15:00",
                    }
                ]
            },
            "status": 200,
        }

    def test_show_has_no_message(self, router, mock_service):
        mock_service.get_by_id.return_value = LendingResult.success(BORROWED_VIEW)

        response = router.dispatch("GET", "/books/1")

        assert response.status_code == 200
        assert set(body(response)["data"]) == {"book"}
        mock_service.get_by_id.assert_called_once_with(1)

    def test_borrow_success_message(self, router, mock_service):
        mock_service.borrow.return_value = LendingResult.success(BORROWED_VIEW)

        response = router.dispatch("POST", "/books/1/borrow")

        assert body(response)["data"]["message"] == "Book borrowed successfully"

    @pytest.mark.parametrize(
        "kind, status",
        [
            (FailureKind.NOT_FOUND, 404),
            (FailureKind.NOT_AVAILABLE, 400),
            (FailureKind.NOT_BORROWED, 400),
        ],
    )
    def test_failure_statuses(self, router, mock_service, kind, status):
        mock_service.return_book.return_value = LendingResult.fail(kind, 7)

        response = router.dispatch("POST", "/books/7/return")

        assert response.status_code == status
        assert body(response)["status"] == status
        assert "7" in body(response)["error"]

    def test_invalid_id_never_reaches_service(self, router, mock_service):
        response = router.dispatch("POST", "/books/abc/borrow")

        assert response.status_code == 400
        assert body(response) == {"error": "Invalid book ID 'abc'", "status": 400}
        mock_service.borrow.assert_not_called()

    def test_non_canonical_id_is_not_found(self, router, mock_service):
        response = router.dispatch("GET", "/books/007")

        assert response.status_code == 404
        assert body(response) == {"error": "Book with ID 007 not found", "status": 404}
        mock_service.get_by_id.assert_not_called()

    def test_store_fault_becomes_500(self, router, mock_service):
        mock_service.get_all.side_effect = StoreError("database unavailable")

        response = router.dispatch("GET", "/books")

        assert response.status_code == 500
        assert body(response) == {"error": "Internal server error", "status": 500}
