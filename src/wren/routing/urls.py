"""Reverse routing — turn parameter maps back into URLs.

``UrlBuilder.build`` picks the registered route that fits a parameter map
best and fills its placeholders. Parameters the route cannot express in
its path go to the query string.
"""

import logging
import unicodedata
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote_plus

from wren._internal.paths import build_query, flatten
from wren.routing.params import PARAMETER_PATH_SEPARATOR, PLACEHOLDER, is_configurable, to_group_name
from wren.routing.route import RouteTemplate
from wren.routing.router import Router

logger = logging.getLogger("wren.routing")

_LIGATURES = {"æ": "ae", "Æ": "AE", "œ": "oe", "Œ": "OE", "ß": "ss", "ø": "o", "Ø": "O", "þ": "th", "Þ": "TH"}
_HTML_SPECIAL = frozenset("&<>\"'")


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else ""
    return str(value)


def slugify(value: Any) -> str:
    """Turn a parameter value into a lowercase, URL-safe path segment.

    Accents are stripped (``é`` -> ``e``), ligatures expanded, HTML-special
    characters dropped, and the rest percent-encoded with spaces
    written as ``-``::

        slugify("Crème Brûlée")  # "creme-brulee"
        slugify(None)            # ""
    """
    text = "".join(_LIGATURES.get(char, char) for char in _text(value))
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(
        char for char in decomposed if not unicodedata.combining(char) and char not in _HTML_SPECIAL
    )
    return quote_plus(stripped, safe="").replace("+", "-").lower()


def _find_key(key: str, mapping: Mapping[str, Any]) -> str | None:
    """Return the key of ``mapping`` equal to ``key`` ignoring case."""
    if key in mapping:
        return key
    folded = key.lower()
    for candidate in mapping:
        if candidate.lower() == folded:
            return candidate
    return None


def _overlay(target: dict[str, Any], source: Mapping[str, Any]) -> None:
    """Update ``target`` from ``source``, reusing existing keys that differ only in case."""
    for key, value in source.items():
        target[_find_key(key, target) or key] = value


class UrlBuilder:
    """Build URLs from parameter maps against a router's table.

    Usage::

        urls = UrlBuilder(router)
        urls.build({"controller": "blog", "action": "show", "page": 2})
        # "/blog/show?page=2"

    Configurable parameters the current request already matched
    (controller, action, ...) are inherited unless overridden.
    """

    __slots__ = ("_router",)

    def __init__(self, router: Router) -> None:
        self._router = router

    def build(
        self,
        query: Mapping[str, Any] | None,
        context: Mapping[str, Any] | None = None,
        name: str | None = None,
    ) -> str:
        """Return the URL for ``query``.

        Args:
            query: Parameters to express. Empty means the site root.
            context: Nested data placeholders may draw from (``{post.id}``
                reads ``context["post"]["id"]``). Never leaks into the
                query string.
            name: Route name to use instead of scoring. Unknown names fall
                back to scoring.
        """
        if not query:
            return "/"

        configurable = self._router.configurable_params
        query_full: dict[str, Any] = dict.fromkeys(configurable)
        matched = self._router.matched_route
        if matched is not None:
            _overlay(
                query_full,
                {key: value for key, value in matched.params.items() if is_configurable(key)},
            )
        _overlay(query_full, query)

        flat_context = flatten(context, PARAMETER_PATH_SEPARATOR) if context else {}

        target: RouteTemplate | None = None
        if name is not None:
            target = self._router.get(name)
            if target is None:
                logger.debug("No route named %r; choosing by parameters", name)
        if target is None:
            params = dict(flat_context)
            _overlay(params, {to_group_name(key): value for key, value in query_full.items()})
            target = self._best_route(params)
        if target is None:
            return "/"

        return self._render(target, query_full, flat_context)

    def _best_route(self, params: Mapping[str, Any]) -> RouteTemplate | None:
        """Pick the route leaking the fewest parameters to the query string.

        A route qualifies when every value it pins matches ``params`` and
        every parameter it needs is present. Ties go to the earlier route.
        """
        best: RouteTemplate | None = None
        best_score: int | None = None

        for route in self._router.routes:
            if not self._fits(route, params):
                continue
            required = {name.lower() for name in route.required}
            score = sum(
                1
                for key in params
                if not is_configurable(key) and key.lower() not in required
            )
            if best_score is None or score < best_score:
                best, best_score = route, score
                if score == 0:
                    break
        return best

    @staticmethod
    def _fits(route: RouteTemplate, params: Mapping[str, Any]) -> bool:
        for key, value in route.configured.items():
            found = _find_key(key, params)
            if found is None or _text(params[found]).lower() != _text(value).lower():
                return False
        return all(_find_key(key, params) is not None for key in route.required)

    @staticmethod
    def _render(route: RouteTemplate, query_full: Mapping[str, Any], context: Mapping[str, Any]) -> str:
        url = "/" + route.template
        formats = dict(route.formats)
        leftover: dict[str, Any] = {}

        for key, value in query_full.items():
            group = to_group_name(key)
            if group in formats:
                url = url.replace(formats.pop(group), slugify(value))
            elif group not in route.defaults:
                leftover[key] = value

        for group in list(formats):
            found = _find_key(group, context)
            if found is not None:
                url = url.replace(formats.pop(group), slugify(context[found]))

        url = PLACEHOLDER.sub("", url)
        query_string = build_query(leftover)
        return f"{url}?{query_string}" if query_string else url
