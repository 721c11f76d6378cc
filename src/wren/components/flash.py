"""Flash notifications — messages queued in the session for the next render."""

from collections.abc import MutableMapping
from typing import TYPE_CHECKING, Any

from wren.components.base import Component

if TYPE_CHECKING:
    from wren.controller import Controller

LEVELS = ("info", "success", "warning", "danger")


class FlashComponent(Component):
    """Queue notifications and hand them to the next rendered view.

    Each notification is ``{"type", "title", "content", "extra"}``. They
    survive redirects because they live in the session, and they are
    cleared once rendered::

        def initialize(self):
            self.add_component(FlashComponent(self.session))
    """

    def __init__(self, session: MutableMapping[str, Any], key: str = "notifications") -> None:
        self.session = session
        self.key = key

    def add(self, level: str, title: str, content: str, extra: Any = None) -> None:
        if level not in LEVELS:
            msg = f"Unknown notification level {level!r}; expected one of {', '.join(LEVELS)}"
            raise ValueError(msg)
        notification = {"type": level, "title": title, "content": content, "extra": extra}
        self.session.setdefault(self.key, []).append(notification)

    def info(self, title: str, content: str, extra: Any = None) -> None:
        self.add("info", title, content, extra)

    def success(self, title: str, content: str, extra: Any = None) -> None:
        self.add("success", title, content, extra)

    def warning(self, title: str, content: str, extra: Any = None) -> None:
        self.add("warning", title, content, extra)

    def danger(self, title: str, content: str, extra: Any = None) -> None:
        self.add("danger", title, content, extra)

    @property
    def pending(self) -> list[dict[str, Any]]:
        return list(self.session.get(self.key, []))

    def before_render(self, controller: "Controller") -> None:
        controller.set(self.key, self.session.pop(self.key, []))
