"""RouteTemplate and MatchedRoute frozen dataclasses."""

import re
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class RouteTemplate:
    """A compiled route. Created by ``Router.connect``, never mutated.

    ``defaults`` holds every parameter the route knows: the configurable
    names and each placeholder (``None`` unless given a default), overlaid
    with the explicit defaults. ``formats`` maps each placeholder's
    parameter name (dots replaced by the group separator) to its literal
    text in ``pattern``.
    """

    name: str
    pattern: str
    extension: str
    regex: re.Pattern[str]
    defaults: dict[str, Any] = field(default_factory=dict)
    formats: dict[str, str] = field(default_factory=dict)

    @property
    def template(self) -> str:
        """The full template text, extension placeholder included."""
        return self.pattern + self.extension

    @property
    def required(self) -> frozenset[str]:
        """Parameters the route needs but has no value for."""
        return frozenset(name for name, value in self.defaults.items() if value is None)

    @property
    def configured(self) -> dict[str, Any]:
        """Parameters the route pins to a concrete value."""
        return {name: value for name, value in self.defaults.items() if value is not None}


@dataclass(frozen=True, slots=True)
class MatchedRoute:
    """The route picked for the current request and its resolved params.

    ``params`` are the route defaults overridden by the non-empty captures,
    with nested placeholder names restored to their dotted form.
    """

    route: RouteTemplate
    params: dict[str, Any]

    @property
    def name(self) -> str:
        return self.route.name

    def get(self, key: str, default: Any = None) -> Any:
        value = self.params.get(key)
        return default if value is None else value
