"""JSON envelope helpers for the Lending Catalog HTTP surface.

Every response body is JSON with ``Content-Type: application/json``:

- success: ``{"data": {...}, "status": <code>}``
- error:   ``{"error": "<message>", "status": <code>}``
"""

import json
from typing import Any

from werkzeug.wrappers import Response

JSON_MIMETYPE = "application/json"


def json_response(payload: dict[str, Any], status: int = 200) -> Response:
    """Serialize ``payload`` into a JSON response with the given status."""
    return Response(
        json.dumps(payload, ensure_ascii=False),
        status=status,
        mimetype=JSON_MIMETYPE,
    )


def success(data: dict[str, Any], status: int = 200) -> Response:
    return json_response({"data": data, "status": status}, status)


def error(message: str, status: int = 400) -> Response:
    return json_response({"error": message, "status": status}, status)


def not_found(message: str = "Resource not found") -> Response:
    return error(message, 404)


def internal_error(message: str = "Internal server error") -> Response:
    return error(message, 500)
