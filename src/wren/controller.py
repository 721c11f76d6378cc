"""Controller base class and the per-request dispatch lifecycle.

One controller instance handles one request::

    initialize -> before_filter (components) -> action
               -> render by content type (before_render hooks first)
               -> after_filter

A component returning ``False`` from ``before_filter`` ends the request
right there: no action, no render, no ``after_filter``. Whatever the
component put on the response (usually a redirect) is still sent.

Subclasses override the hooks and call ``super()`` to keep component
dispatch::

    class BlogController(Controller):
        def initialize(self):
            self.add_component(FlashComponent(self.session))

        def show_action(self, slug, page=1):
            self.set("post", load_post(slug))
"""

import enum
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, TypeVar

from wren._internal.paths import deep_merge, drop_private
from wren.components.base import BeforeFilter, BeforeRedirect, BeforeRender
from wren.errors import ConfigurationError, NotFound
from wren.http.request import Request
from wren.http.response import Response
from wren.registry import ControllerSpec, action_method_name, action_stem, snake_case
from wren.templating.serializers import to_json, to_xml

if TYPE_CHECKING:
    from wren.app import App
    from wren.components.flash import FlashComponent
    from wren.routing.urls import UrlBuilder

logger = logging.getLogger("wren.controller")

C = TypeVar("C")

SAVED_STATE_KEY = "saved_state"
REDIRECT_FROM_KEY = "redirect_from"


class Stage(enum.Enum):
    """Where a controller is in its lifecycle."""

    CREATED = "created"
    INITIALIZED = "initialized"
    FILTERED = "filtered"
    RENDERED = "rendered"
    COMPLETED = "completed"


class Controller:
    """Base class for request handlers.

    Attributes:
        app: The application (router, URL builder, views, services).
        request: The routed request.
        response: The response being built; shared with components.
        view: View data handed to the template or serializer.
        auto_render: Render automatically after the action.
        stage: Lifecycle position, for logging and tests.
    """

    def __init__(self, app: "App", request: Request, response: Response, spec: ControllerSpec) -> None:
        self.app = app
        self.request = request
        self.response = response
        self.spec = spec
        self.view: dict[str, Any] = {}
        self.auto_render = True
        self.stage = Stage.CREATED
        self._components: dict[type, Any] = {}

    # -- Accessors --

    @property
    def url(self) -> "UrlBuilder":
        return self.app.url

    @property
    def session(self) -> dict[str, Any]:
        return self.request.session

    @property
    def flash(self) -> "FlashComponent | None":
        from wren.components.flash import FlashComponent

        return self.component(FlashComponent)

    def get(self, key: str, default: Any = None) -> Any:
        return self.view.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.view[key] = value

    def disable_autorender(self) -> None:
        self.auto_render = False

    # -- Components --

    def add_component(self, component: C) -> C:
        """Register ``component``; hooks run in registration order.

        A second component of the same type replaces the first in place.
        """
        self._components[type(component)] = component
        return component

    def component(self, cls: type[C]) -> C | None:
        return self._components.get(cls)

    @property
    def components(self) -> tuple[Any, ...]:
        return tuple(self._components.values())

    # -- Lifecycle --

    def dispatch(self) -> Response:
        """Run the whole lifecycle and return the response to emit."""
        self.initialize()
        self.stage = Stage.INITIALIZED

        if not self.before_filter():
            logger.debug("%s stopped in before_filter", type(self).__name__)
            self.stage = Stage.COMPLETED
            return self.response

        self.filter()
        self.stage = Stage.FILTERED

        if not self.response.has_location() and self.auto_render and self.render():
            self.stage = Stage.RENDERED

        self.after_filter()
        self.stage = Stage.COMPLETED
        return self.response

    def initialize(self) -> None:
        """Per-request setup: register components, disable auto-render."""

    def before_filter(self) -> bool:
        for component in self.components:
            if isinstance(component, BeforeFilter) and component.before_filter(self) is False:
                return False
        return True

    def filter(self) -> None:
        """Invoke the routed action with its bound parameters."""
        name = action_method_name(self.request.prefix, self.request.action)
        action = self.spec.actions.get(name)
        if action is None:
            raise NotFound(f"Action {name!r} not found in {type(self).__name__}")
        kwargs = action.bind(self.request.params.merged("query", "route"))
        action.function(self, **kwargs)

    def after_filter(self) -> None:
        """Per-request teardown after the action (and render) ran."""

    # -- Rendering --

    def before_render(self) -> None:
        for component in self.components:
            if isinstance(component, BeforeRender):
                component.before_render(self)

    def render(self) -> bool:
        """Render by the response content type. Returns whether anything rendered."""
        media_type = self.response.media_type
        if media_type == "text/html":
            self.render_html()
        elif media_type == "application/json":
            self.render_json()
        elif media_type == "application/xml":
            self.render_xml()
        else:
            return False
        return True

    def template_name(self) -> str:
        """``{controller}/{prefix_action}.html``."""
        return f"{snake_case(self.request.controller or '')}/{action_stem(self.request.prefix, self.request.action)}.html"

    def render_html(self, template: str | None = None) -> None:
        self.before_render()
        self.auto_render = False
        views = self.app.views
        if views is None:
            msg = f"Cannot render {template or self.template_name()!r}: no template directory configured"
            raise ConfigurationError(msg)
        body = views.render(template or self.template_name(), self.view)
        self.response.set_content_type("text/html; charset=utf-8").set_body(body)

    def render_json(self) -> None:
        self.before_render()
        self.auto_render = False
        self.response.set_content_type("application/json").set_body(to_json(self.view))

    def render_xml(self) -> None:
        self.before_render()
        self.auto_render = False
        self.response.set_content_type("application/xml").set_body(to_xml(self.view))

    # -- Redirects --

    def before_redirect(self, url: Any) -> bool:
        for component in self.components:
            if isinstance(component, BeforeRedirect) and component.before_redirect(self, url) is False:
                return False
        return True

    def redirect(self, url: str | Mapping[str, Any] | None = None, status: int | None = None) -> bool:
        """Point the response at ``url``.

        A mapping is turned into a URL by the URL builder. Returns ``False``
        (leaving the response untouched) when a redirect hook vetoes it.
        """
        target: str | Mapping[str, Any] = {} if url is None else url
        if not self.before_redirect(target):
            return False
        if not isinstance(target, str):
            target = self.url.build(target)
        self.response.set_location(target).set_status(status or 302)
        return True

    def redirect_self(self, status: int | None = None) -> bool:
        return self.redirect(self.request.url, status)

    def redirect_home(self, status: int | None = None) -> bool:
        return self.redirect({}, status)

    def redirect_from(self, url: str | Mapping[str, Any] | None, status: int | None = None) -> bool:
        """Redirect, remembering the current URL for ``redirect_back``."""
        self.session[REDIRECT_FROM_KEY] = self.request.url
        return self.redirect(url, status)

    def redirect_back(self, url: str | Mapping[str, Any] | None = None, status: int | None = None) -> bool:
        """Redirect to the URL remembered by ``redirect_from``, else to ``url``."""
        remembered = self.session.pop(REDIRECT_FROM_KEY, None)
        return self.redirect(remembered or url, status)

    # -- Saved state --

    def _state_key(self) -> str:
        return f"{self.request.controller}_{self.request.action}"

    def save_state(self, data: Mapping[str, Any], secure: bool = True) -> None:
        """Stash ``data`` in the session for the next visit to this action.

        With ``secure``, keys starting with ``_`` are dropped at every level.
        """
        payload = drop_private(data) if secure else dict(data)
        if payload:
            self.session.setdefault(SAVED_STATE_KEY, {})[self._state_key()] = payload

    def restore_state(self, data: dict[str, Any]) -> bool:
        """Merge stashed state into ``data`` in place, consuming it once."""
        saved = self.session.get(SAVED_STATE_KEY, {})
        state = saved.pop(self._state_key(), None)
        if state is None:
            return False
        if not saved:
            self.session.pop(SAVED_STATE_KEY, None)
        data.update(deep_merge(data, state))
        return True
