"""Request router for the Lending Catalog.

Routes are registered as an HTTP method, a path template and a handler.
A template is a sequence of ``/``-separated segments, each either literal
text or a named placeholder written ``{name}``:

    GET  /books
    GET  /books/{id}
    POST /books/{id}/borrow

MATCHING RULES:
- Templates are tried in registration order; the first match wins
- The whole path must match (no prefix matches, no trailing slash slack)
- Literal segments compare case-sensitively
- A placeholder captures exactly one non-empty segment and never a ``/``,
  so ``/books/1/2/borrow`` does not match ``/books/{id}/borrow``

Handlers receive the captured parameters as an ordered ``dict`` and return
a response. The router turns "no route" into a 404 and an exception raised
by a handler into a 500.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field

from werkzeug.wrappers import Response

from . import responses

logger = logging.getLogger(__name__)

Handler = Callable[[dict[str, str]], Response]

_PLACEHOLDER = re.compile(r"^\{([A-Za-z_][A-Za-z0-9_]*)\}$")


class RouteTemplateError(ValueError):
    """Raised when a path template cannot be compiled."""


def compile_template(template: str) -> tuple[re.Pattern[str], tuple[str, ...]]:
    """Compile a path template into an anchored regex.

    Args:
        template: Path template such as ``/books/{id}/borrow``

    Returns:
        The compiled pattern and the placeholder names in path order

    Raises:
        RouteTemplateError: If the template is malformed or repeats a name
    """
    if not template.startswith("/"):
        raise RouteTemplateError(f"Route template must start with '/': {template!r}")

    names: list[str] = []
    parts: list[str] = []

    for segment in template[1:].split("/") if template != "/" else []:
        if not segment:
            raise RouteTemplateError(f"Empty segment in route template {template!r}")

        placeholder = _PLACEHOLDER.match(segment)
        if placeholder:
            name = placeholder.group(1)
            if name in names:
                raise RouteTemplateError(
                    f"Duplicate parameter '{name}' in route template {template!r}"
                )
            names.append(name)
            parts.append(f"(?P<{name}>[^/]+)")
        elif "{" in segment or "}" in segment:
            raise RouteTemplateError(
                f"Invalid placeholder segment '{segment}' in route template {template!r}"
            )
        else:
            parts.append(re.escape(segment))

    pattern = "/" + "/".join(parts)
    return re.compile(rf"\A{pattern}\Z"), tuple(names)


@dataclass(frozen=True)
class Route:
    """A registered (method, template) pair and its handler."""

    method: str
    template: str
    handler: Handler
    pattern: re.Pattern[str] = field(repr=False)
    param_names: tuple[str, ...] = ()

    def match(self, method: str, path: str) -> dict[str, str] | None:
        """Return the captured parameters if this route matches, else None."""
        if method != self.method:
            return None
        found = self.pattern.match(path)
        if found is None:
            return None
        return {name: found.group(name) for name in self.param_names}


@dataclass(frozen=True)
class RouteMatch:
    """The route chosen for a request and the parameters it bound."""

    route: Route
    params: dict[str, str]

    @property
    def handler(self) -> Handler:
        return self.route.handler


class Router:
    """Dispatches requests to handlers by method and path template."""

    def __init__(self) -> None:
        self._routes: list[Route] = []

    @property
    def routes(self) -> tuple[Route, ...]:
        """Registered routes in registration order."""
        return tuple(self._routes)

    def add(self, method: str, template: str, handler: Handler) -> Route:
        """Register ``handler`` for ``method`` requests matching ``template``."""
        pattern, names = compile_template(template)
        route = Route(
            method=method.upper(),
            template=template,
            handler=handler,
            pattern=pattern,
            param_names=names,
        )
        self._routes.append(route)
        logger.debug("Registered route %s %s", route.method, template)
        return route

    def get(self, template: str, handler: Handler) -> Route:
        return self.add("GET", template, handler)

    def post(self, template: str, handler: Handler) -> Route:
        return self.add("POST", template, handler)

    def match(self, method: str, path: str) -> RouteMatch | None:
        """Find the first registered route matching the request.

        Returns:
            The match with its bound parameters, or None
        """
        for route in self._routes:
            params = route.match(method, path)
            if params is not None:
                return RouteMatch(route=route, params=params)
        return None

    def dispatch(self, method: str, path: str) -> Response:
        """Route a request and invoke its handler.

        Returns:
            The handler's response; 404 when nothing matches; 500 when the
            handler raises
        """
        found = self.match(method, path)
        if found is None:
            logger.info("No route for %s %s", method, path)
            return responses.not_found("Route not found")

        try:
            return found.handler(found.params)
        except Exception:
            logger.exception("Unhandled error in %s %s", method, found.route.template)
            return responses.internal_error()
