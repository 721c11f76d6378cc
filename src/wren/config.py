"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups. ``AppConfig.from_env`` builds one from a dotenv
file overlaid by the process environment.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import dotenv_values

from wren.errors import ConfigurationError

ENVIRONMENTS = ("production", "development")
LOG_LEVELS = ("debug", "info", "warning", "error", "critical")
LOG_FORMATS = ("text", "json")


def load_env(path: str | Path | None = ".env") -> dict[str, str]:
    """Read ``path`` as a dotenv file and overlay ``os.environ``.

    A missing file is not an error: the process environment alone is used.
    """
    values: dict[str, str] = {}
    if path is not None and Path(path).is_file():
        values.update({k: v for k, v in dotenv_values(path).items() if v is not None})
    values.update(os.environ)
    return values


def require(env: Mapping[str, str], *names: str) -> dict[str, str]:
    """Return ``names`` from ``env``, failing on any missing or empty key."""
    missing = [name for name in names if not env.get(name)]
    if missing:
        msg = f"Missing required setting(s): {', '.join(missing)}"
        raise ConfigurationError(msg)
    return {name: env[name] for name in names}


def _allowed(name: str, value: str, allowed: tuple[str, ...]) -> str:
    value = value.strip().lower()
    if value not in allowed:
        msg = f"{name} must be one of {', '.join(allowed)}; got {value!r}"
        raise ConfigurationError(msg)
    return value


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(environment="development", secret_key="s3cr3t")
    """

    environment: str = "production"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Security
    secret_key: str = ""
    session_cookie: str = "wren_session"
    session_max_age: int = 86400 * 14

    # Templates
    template_dir: str | Path = "templates"
    autoescape: bool = True
    trim_blocks: bool = True
    lstrip_blocks: bool = True

    # Limits
    max_content_length: int = 16 * 1024 * 1024  # 16 MB

    # Logging
    log_level: str = "info"
    log_file: str | Path | None = None
    log_format: str = "text"
    log_backups: int = 14

    def __post_init__(self) -> None:
        _allowed("environment", self.environment, ENVIRONMENTS)
        _allowed("log_level", self.log_level, LOG_LEVELS)
        _allowed("log_format", self.log_format, LOG_FORMATS)

    @property
    def debug(self) -> bool:
        """True outside production: verbose error pages, template auto-reload."""
        return self.environment == "development"

    @classmethod
    def from_env(cls, path: str | Path | None = ".env", **overrides: object) -> "AppConfig":
        """Build a config from ``path`` and the process environment.

        ``ENVIRONMENT`` and ``LOG_LEVEL`` are required. ``SECRET_KEY``,
        ``TEMPLATE_DIR``, ``LOG_FILE``, ``LOG_FORMAT``, ``HOST`` and ``PORT``
        are optional. Keyword ``overrides`` win over the environment.
        """
        env = load_env(path)
        settings = require(env, "ENVIRONMENT", "LOG_LEVEL")
        kwargs: dict[str, object] = {
            "environment": _allowed("ENVIRONMENT", settings["ENVIRONMENT"], ENVIRONMENTS),
            "log_level": _allowed("LOG_LEVEL", settings["LOG_LEVEL"], LOG_LEVELS),
        }
        optional = {
            "SECRET_KEY": "secret_key",
            "TEMPLATE_DIR": "template_dir",
            "LOG_FILE": "log_file",
            "LOG_FORMAT": "log_format",
            "HOST": "host",
        }
        for key, field_name in optional.items():
            if env.get(key):
                kwargs[field_name] = env[key]
        if env.get("PORT"):
            try:
                kwargs["port"] = int(env["PORT"])
            except ValueError as exc:
                msg = f"PORT must be an integer; got {env['PORT']!r}"
                raise ConfigurationError(msg) from exc
        kwargs.update(overrides)
        return cls(**kwargs)  # type: ignore[arg-type]
