"""Ordered pattern router.

Routes are connected during setup and compiled to anchored,
case-insensitive regular expressions. Matching scans them in registration
order and the first hit wins, so specific routes must be connected before
general ones.
"""

import logging
import re
from contextvars import ContextVar
from typing import Any
from urllib.parse import urlsplit

from wren.errors import ConfigurationError
from wren.routing.params import (
    CONFIGURABLE_PARAMS,
    DEFAULT_PLACEHOLDER_PATTERN,
    EXTENSION_PLACEHOLDER,
    PLACEHOLDER,
    from_group_name,
    to_group_name,
)
from wren.routing.route import MatchedRoute, RouteTemplate

logger = logging.getLogger("wren.routing")


def compile_route(name: str, pattern: str, defaults: dict[str, Any] | None = None) -> RouteTemplate:
    """Compile ``pattern`` into a RouteTemplate.

    Examples::

        "{controller}/{action}"  -> ^(?P<controller>[a-z_-]+)/(?P<action>[a-z_-]+)(?P<extension>(\\.\\w+)?)$
        "posts/{post.id:\\d+}"   -> group ``post___id``, param ``post.id``

    Raises ``ConfigurationError`` for stray braces, invalid or repeated
    placeholder names, and custom expressions that do not compile.
    """
    template = pattern + EXTENSION_PLACEHOLDER
    parts: list[str] = []
    formats: dict[str, str] = {}
    position = 0

    for found in PLACEHOLDER.finditer(template):
        parts.append(_literal(name, template[position : found.start()]))
        group = to_group_name(found["name"])
        if group in formats:
            msg = f"Route {name!r}: placeholder {found['name']!r} appears more than once"
            raise ConfigurationError(msg)
        if not group.isidentifier():
            msg = f"Route {name!r}: invalid placeholder name {found['name']!r}"
            raise ConfigurationError(msg)
        formats[group] = found.group(0)
        parts.append(f"(?P<{group}>{found['pattern'] or DEFAULT_PLACEHOLDER_PATTERN})")
        position = found.end()
    parts.append(_literal(name, template[position:]))

    try:
        regex = re.compile("^" + "".join(parts) + "$", re.IGNORECASE)
    except re.error as exc:
        msg = f"Route {name!r}: pattern {pattern!r} does not compile: {exc}"
        raise ConfigurationError(msg) from exc

    params: dict[str, Any] = dict.fromkeys(CONFIGURABLE_PARAMS)
    params.update(dict.fromkeys(formats))
    params.update({to_group_name(key): value for key, value in (defaults or {}).items()})

    return RouteTemplate(
        name=name,
        pattern=pattern,
        extension=EXTENSION_PLACEHOLDER,
        regex=regex,
        defaults=params,
        formats=formats,
    )


def _literal(name: str, text: str) -> str:
    if "{" in text or "}" in text:
        msg = f"Route {name!r}: malformed placeholder near {text!r}"
        raise ConfigurationError(msg)
    return re.escape(text)


class Router:
    """Ordered route table.

    Usage::

        router = Router()
        router.connect("full", "{controller}/{action}").connect(
            "controller_only", "{controller}", {"action": "index"}
        )
        if router.match("/blog/show"):
            router.matched_route.params["action"]  # "show"

    The matched route is kept per execution context, so one router can
    serve concurrent requests.
    """

    __slots__ = ("_frozen", "_matched", "_names", "_routes")

    def __init__(self) -> None:
        self._routes: list[RouteTemplate] = []
        self._names: dict[str, RouteTemplate] = {}
        self._matched: ContextVar[MatchedRoute | None] = ContextVar("wren_matched_route", default=None)
        self._frozen = False

    def connect(self, name: str, pattern: str, defaults: dict[str, Any] | None = None) -> "Router":
        """Compile and append a route. Returns the router for chaining."""
        if self._frozen:
            msg = "Cannot connect routes after the app has started."
            raise RuntimeError(msg)
        if name in self._names:
            msg = f"Duplicate route name {name!r}."
            raise ConfigurationError(msg)
        route = compile_route(name, pattern, defaults)
        self._routes.append(route)
        self._names[name] = route
        logger.debug("Connected route %s: %s", name, route.regex.pattern)
        return self

    def freeze(self) -> None:
        self._frozen = True

    @property
    def routes(self) -> tuple[RouteTemplate, ...]:
        return tuple(self._routes)

    @property
    def configurable_params(self) -> tuple[str, ...]:
        return CONFIGURABLE_PARAMS

    @property
    def matched_route(self) -> MatchedRoute | None:
        return self._matched.get()

    def get(self, name: str) -> RouteTemplate | None:
        """Look a route up by name."""
        return self._names.get(name)

    def match(self, url: str) -> bool:
        """Match ``url`` against the table in registration order.

        Only the path component is considered, with ``/`` trimmed from both
        ends. On success the matched route becomes available through
        ``matched_route`` and ``True`` is returned.
        """
        path = urlsplit(url).path.strip("/")
        for route in self._routes:
            found = route.regex.fullmatch(path)
            if found is None:
                continue
            params = {from_group_name(key): value for key, value in route.defaults.items()}
            for group, value in found.groupdict().items():
                if value:
                    params[from_group_name(group)] = value
            self._matched.set(MatchedRoute(route=route, params=params))
            return True
        self._matched.set(None)
        return False

    def __len__(self) -> int:
        return len(self._routes)
