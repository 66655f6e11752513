"""
Tests for the request router.

These tests verify:
1. Template compilation and its error cases
2. Whole-path, case-sensitive, one-segment-per-placeholder matching
3. Registration order as the tie-breaker
4. Dispatch turning "no route" into 404 and handler errors into 500
"""

import json

import pytest

from lending_catalog.http import responses
from lending_catalog.http.router import Router, RouteTemplateError, compile_template


def echo(name):
    """A handler that reports which route ran and what it captured."""

    def handler(params):
        return responses.success({"route": name, "params": params})

    return handler


def body(response):
    return json.loads(response.get_data(as_text=True))


@pytest.fixture
def router():
    router = Router()
    router.get("/books", echo("index"))
    router.get("/books/{id}", echo("show"))
    router.post("/books/{id}/borrow", echo("borrow"))
    router.post("/books/{id}/return", echo("return"))
    return router


class TestCompileTemplate:
    def test_literal_template(self):
        pattern, names = compile_template("/books")

        assert names == ()
        assert pattern.match("/books")
        assert not pattern.match("/books/")

    def test_placeholders_in_order(self):
        _, names = compile_template("/shelves/{shelf}/books/{id}")

        assert names == ("shelf", "id")

    def test_literal_text_is_escaped(self):
        pattern, _ = compile_template("/books.json")

        assert pattern.match("/books.json")
        assert not pattern.match("/booksXjson")

    def test_root_template(self):
        pattern, names = compile_template("/")

        assert names == ()
        assert pattern.match("/")
        assert not pattern.match("/books")

    @pytest.mark.parametrize(
        "template",
        [
            "books",
            "/books//borrow",
            "/books/{id}/{id}",
            "/books/{id",
            "/books/x{id}",
            "/books/{1id}",
        ],
    )
    def test_invalid_templates(self, template):
        with pytest.raises(RouteTemplateError):
            compile_template(template)

    def test_error_is_value_error(self):
        with pytest.raises(ValueError):
            Router().get("no-slash", echo("bad"))


class TestMatching:
    def test_match_binds_parameters(self, router):
        found = router.match("POST", "/books/17/borrow")

        assert found.route.template == "/books/{id}/borrow"
        assert found.params == {"id": "17"}

    def test_method_must_match(self, router):
        assert router.match("POST", "/books") is None
        assert router.match("GET", "/books/1/borrow") is None

    def test_whole_path_must_match(self, router):
        assert router.match("GET", "/books/") is None
        assert router.match("GET", "/api/books") is None
        assert router.match("GET", "/books/1/extra") is None

    def test_literals_are_case_sensitive(self, router):
        assert router.match("GET", "/Books") is None
        assert router.match("POST", "/books/1/BORROW") is None

    def test_placeholder_never_spans_a_slash(self, router):
        assert router.match("POST", "/books/1/2/borrow") is None

    def test_placeholder_requires_a_value(self, router):
        assert router.match("POST", "/books//borrow") is None

    def test_placeholder_captures_raw_text(self, router):
        """Validation of captured text belongs to the handler."""
        assert router.match("GET", "/books/abc").params == {"id": "abc"}

    def test_first_registered_route_wins(self):
        router = Router()
        router.get("/books/{id}", echo("by-id"))
        router.get("/books/latest", echo("latest"))

        found = router.match("GET", "/books/latest")

        assert found.route.template == "/books/{id}"

    def test_routes_in_registration_order(self, router):
        assert [(route.method, route.template) for route in router.routes] == [
            ("GET", "/books"),
            ("GET", "/books/{id}"),
            ("POST", "/books/{id}/borrow"),
            ("POST", "/books/{id}/return"),
        ]

    def test_method_is_normalized_on_registration(self):
        router = Router()
        router.add("get", "/books", echo("index"))

        assert router.match("GET", "/books") is not None


class TestDispatch:
    def test_dispatch_calls_handler(self, router):
        response = router.dispatch("POST", "/books/5/return")

        assert response.status_code == 200
        assert body(response)["data"] == {"route": "return", "params": {"id": "5"}}

    def test_no_route_is_404(self, router):
        response = router.dispatch("DELETE", "/books/1")

        assert response.status_code == 404
        assert response.mimetype == "application/json"
        assert body(response) == {"error": "Route not found", "status": 404}

    def test_handler_exception_is_500(self):
        def explode(params):
            raise RuntimeError("handler bug")

        router = Router()
        router.get("/boom", explode)

        response = router.dispatch("GET", "/boom")

        assert response.status_code == 500
        assert body(response) == {"error": "Internal server error", "status": 500}
