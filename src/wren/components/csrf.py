"""CSRF protection component — session-backed, per-form tokens.

On GET the component issues a token for the current action and exposes it
to the view as ``csrf`` (``{"key": "_csrf", "value": token}``). On POST the
submitted token must match. A mismatch does not surface as an error page:
the submitted data is saved, a warning is flashed, and the browser is
sent back to the form.

Templates::

    <form method="post">
        <input type="hidden" name="{{ csrf.key }}" value="{{ csrf.value }}">
        ...
    </form>
"""

import logging
import secrets
import time
from collections.abc import Iterable, MutableMapping
from typing import TYPE_CHECKING, Any

from wren.components.base import Component
from wren.errors import SecurityError

if TYPE_CHECKING:
    from wren.controller import Controller

logger = logging.getLogger("wren.csrf")

FORM_FIELD = "_csrf"
HEADER = "x-csrf-token"


class CsrfTokenStore:
    """Tokens in the session, one per form key, each with an expiry."""

    session_key = "_csrf_tokens"
    view_key = "csrf"

    def __init__(self, session: MutableMapping[str, Any], validity: int) -> None:
        self._session = session
        self._validity = validity

    @property
    def _tokens(self) -> dict[str, list[Any]]:
        return self._session.setdefault(self.session_key, {})

    def clean(self, now: float | None = None) -> None:
        """Drop expired tokens."""
        now = time.time() if now is None else now
        tokens = self._session.get(self.session_key)
        if not tokens:
            return
        for key in [key for key, (_, expires) in tokens.items() if expires <= now]:
            del tokens[key]
        if not tokens:
            del self._session[self.session_key]

    def create(self, key: str) -> str:
        token = secrets.token_urlsafe(32)
        self._tokens[key] = [token, time.time() + self._validity]
        return token

    def verify(self, key: str, submitted: str | None) -> None:
        """Raise ``SecurityError`` unless ``submitted`` is the live token for ``key``."""
        entry = self._session.get(self.session_key, {}).get(key)
        if entry is None:
            raise SecurityError(f"No CSRF token issued for {key!r}")
        token, expires = entry
        if expires <= time.time():
            raise SecurityError(f"CSRF token for {key!r} expired")
        if not submitted or not secrets.compare_digest(str(submitted), token):
            raise SecurityError(f"CSRF token mismatch for {key!r}")


class CsrfComponent(Component):
    """Verify CSRF tokens on the actions it is enabled for.

    Usage::

        def initialize(self):
            self.add_component(FlashComponent(self.session))
            csrf = self.add_component(CsrfComponent(validity=3600))
            csrf.enable_for(["edit", "delete"])
    """

    def __init__(self, validity: int = 3600, enabled: bool = False) -> None:
        self.validity = validity
        self._actions: list[str] | None = None
        self._enabled = enabled

    def enable_for(self, actions: Iterable[str] | None) -> None:
        """Protect only ``actions`` (everything, when ``None``)."""
        self._actions = None if actions is None else [action.lower() for action in actions]
        self._enabled = True

    def enable_by_default(self) -> None:
        self.enable_for(None)

    def disable_for(self, actions: Iterable[str] | None) -> None:
        """Protect everything except ``actions`` (nothing, when ``None``)."""
        self._actions = None if actions is None else [action.lower() for action in actions]
        self._enabled = False

    def disable_by_default(self) -> None:
        self.disable_for(None)

    def should_filter(self, action: str) -> bool:
        if self._actions is None:
            return self._enabled
        return (action.lower() in self._actions) == self._enabled

    @staticmethod
    def form_key(controller: "Controller") -> str:
        request = controller.request
        action = (request.prefix or "") + (request.action or "")
        query_values = "".join(value for _, value in request.query.multi_items())
        return "_".join([request.controller or "", action, query_values])

    def before_filter(self, controller: "Controller") -> bool:
        store = CsrfTokenStore(controller.session, self.validity)
        store.clean()

        request = controller.request
        if not self.should_filter((request.prefix or "") + (request.action or "")):
            return True

        key = self.form_key(controller)
        if request.is_get:
            controller.set(store.view_key, {"key": FORM_FIELD, "value": store.create(key)})
        elif request.is_post:
            body = request.form().nested()
            try:
                store.verify(key, body.get(FORM_FIELD) or request.headers.get(HEADER))
            except SecurityError as exc:
                logger.info("Rejected %s %s: %s", request.method, request.path, exc)
                controller.save_state(body)
                if controller.flash is not None:
                    controller.flash.warning("CSRF security", "The CSRF token is invalid")
                controller.redirect_self()
                return False
        return True
