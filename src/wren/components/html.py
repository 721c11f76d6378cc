"""HTML head helpers: meta tags, stylesheets and scripts for the layout."""

from typing import TYPE_CHECKING, Any

from wren.components.base import Component

if TYPE_CHECKING:
    from wren.controller import Controller


class HtmlComponent(Component):
    """Collect ``<head>`` assets during the action, publish them at render.

    Usage::

        html = self.add_component(HtmlComponent())
        html.meta({"name": "description", "content": "..."}).css("/site.css").js("/app.js", defer=True)

    The view receives ``metas``, ``stylesheets`` and ``scripts`` as lists
    of attribute mappings.
    """

    def __init__(self) -> None:
        self._metas: dict[str, dict[str, Any]] = {}
        self._stylesheets: list[dict[str, Any]] = []
        self._scripts: list[dict[str, Any]] = []

    def meta(self, properties: dict[str, Any]) -> "HtmlComponent":
        """Add a meta tag. Keyed by its first attribute pair, so a later
        ``{"name": "description", ...}`` replaces an earlier one.
        """
        if not properties:
            return self
        first_key, first_value = next(iter(properties.items()))
        self._metas[f"{first_key}={first_value}"] = dict(properties)
        return self

    def css(self, href: str, **attributes: Any) -> "HtmlComponent":
        self._stylesheets.append({"rel": "stylesheet", "href": href, **attributes})
        return self

    def js(self, src: str, **attributes: Any) -> "HtmlComponent":
        self._scripts.append({"src": src, **attributes})
        return self

    def before_render(self, controller: "Controller") -> None:
        controller.set("metas", list(self._metas.values()))
        controller.set("stylesheets", list(self._stylesheets))
        controller.set("scripts", list(self._scripts))
