"""Component contract.

A component is a pluggable piece of cross-cutting behaviour attached to
one controller instance. The controller calls it at three fixed points,
each a separate capability:

- ``before_filter(controller) -> bool``: before the action; ``False`` stops
  the pipeline.
- ``before_render(controller) -> None``: before the view is rendered.
- ``before_redirect(controller, url) -> bool``: before a redirect is
  applied; ``False`` cancels it.

Any object implementing one or more of these protocols can be registered.
``Component`` implements all three as pass-throughs for subclassing.
"""

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from wren.controller import Controller


@runtime_checkable
class BeforeFilter(Protocol):
    def before_filter(self, controller: "Controller") -> bool: ...


@runtime_checkable
class BeforeRender(Protocol):
    def before_render(self, controller: "Controller") -> None: ...


@runtime_checkable
class BeforeRedirect(Protocol):
    def before_redirect(self, controller: "Controller", url: Any) -> bool: ...


class Component:
    """No-op implementation of every hook."""

    def before_filter(self, controller: "Controller") -> bool:
        return True

    def before_render(self, controller: "Controller") -> None:
        return None

    def before_redirect(self, controller: "Controller", url: Any) -> bool:
        return True
