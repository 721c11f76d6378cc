"""Signed cookie sessions.

Session data is serialized as JSON and signed with ``itsdangerous``. The
store loads a plain dict before dispatch; the pipeline mutates it through
``request.session`` and the store writes it back as a cookie afterwards.
Values must therefore be JSON-serializable.
"""

import logging
from dataclasses import dataclass
from typing import Any

from itsdangerous import BadSignature, URLSafeTimedSerializer

from wren.config import AppConfig
from wren.errors import ConfigurationError
from wren.http.request import Request
from wren.http.response import Response

logger = logging.getLogger("wren.sessions")


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """Session cookie settings. ``secret_key`` is required."""

    secret_key: str
    cookie_name: str = "wren_session"
    max_age: int = 86400 * 14
    path: str = "/"
    secure: bool = False
    httponly: bool = True
    samesite: str = "lax"

    @classmethod
    def from_app_config(cls, config: AppConfig) -> "SessionConfig":
        return cls(
            secret_key=config.secret_key,
            cookie_name=config.session_cookie,
            max_age=config.session_max_age,
        )


class SessionStore:
    """Load and save the signed session cookie.

    Usage::

        store = SessionStore(SessionConfig(secret_key="s3cr3t"))
        session = store.load(request)
        session["visits"] = session.get("visits", 0) + 1
        store.save(request, response, session)
    """

    __slots__ = ("_config", "_serializer")

    def __init__(self, config: SessionConfig) -> None:
        if not config.secret_key:
            msg = "SessionConfig.secret_key must not be empty."
            raise ConfigurationError(msg)
        self._config = config
        self._serializer = URLSafeTimedSerializer(config.secret_key, salt="wren.session")

    @property
    def config(self) -> SessionConfig:
        return self._config

    def load(self, request: Request) -> dict[str, Any]:
        """Verify and deserialize the session cookie; ``{}`` when absent or tampered."""
        cookie_value = request.cookies.get(self._config.cookie_name)
        if not cookie_value:
            return {}
        try:
            data = self._serializer.loads(cookie_value, max_age=self._config.max_age)
        except BadSignature:
            logger.info("Discarding session cookie with a bad or expired signature")
            return {}
        return data if isinstance(data, dict) else {}

    def save(self, request: Request, response: Response, session: dict[str, Any]) -> None:
        """Write ``session`` back, or expire the cookie once the session is empty."""
        cfg = self._config
        if not session:
            if cfg.cookie_name in request.cookies:
                response.delete_cookie(cfg.cookie_name, path=cfg.path)
            return
        response.set_cookie(
            cfg.cookie_name,
            self._serializer.dumps(session),
            max_age=cfg.max_age,
            path=cfg.path,
            secure=cfg.secure,
            httponly=cfg.httponly,
            samesite=cfg.samesite,
        )
