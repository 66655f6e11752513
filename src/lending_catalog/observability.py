"""Logfire observability for the Lending Catalog."""

import json
import logging
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import logfire
from werkzeug.http import HTTP_STATUS_CODES
from werkzeug.wrappers import Response

from .config import CatalogConfig

logger = logging.getLogger(__name__)


def initialize_observability(config: CatalogConfig) -> None:
    """Configure Logfire from the service configuration.

    Spans are only exported when ``send_to_logfire`` is set; otherwise they
    stay local (and on the console if ``logfire_console`` is set).
    """
    logfire.configure(
        service_name=config.service_name,
        service_version=config.service_version,
        environment=config.environment,
        token=config.logfire_token,
        send_to_logfire=config.send_to_logfire,
        console=None if config.logfire_console else False,
    )
    logger.debug(
        "Observability configured (send_to_logfire=%s, console=%s)",
        config.send_to_logfire,
        config.logfire_console,
    )


@contextmanager
def request_span(method: str, path: str) -> Generator[Any, None, None]:
    """Trace one HTTP request.

    The caller records the response status on the yielded span; an escaping
    exception is recorded on the span and re-raised.
    """
    with logfire.span(
        "HTTP {http_method} {http_path}",
        _span_name=f"HTTP {method}",
        http_method=method,
        http_path=path,
    ) as span:
        try:
            yield span
        except Exception as e:
            span.set_attribute("error.type", type(e).__name__)
            span.set_attribute("error.message", str(e))
            raise


def record_response(span: Any, response: Response) -> None:
    """Record a response on its request span.

    The router answers handler failures with a 500 instead of raising, so a
    5xx status is what marks the request as failed on the span.
    """
    status = response.status_code
    span.set_attribute("http.status_code", status)

    if status < 500:
        span.set_attribute("http.status", "success")
        return

    span.set_attribute("http.status", "error")
    span.set_attribute("error.type", HTTP_STATUS_CODES.get(status, "Server Error"))
    try:
        message = json.loads(response.get_data(as_text=True)).get("error")
    except ValueError:
        message = None
    span.set_attribute("error.message", message or response.status)
