"""Serve a live wren App with uvicorn.

uvicorn ships as the ``server`` extra (``pip install wren[server]``) and
is imported only when a server is actually started.
"""

from typing import TYPE_CHECKING

from wren.errors import ConfigurationError

if TYPE_CHECKING:
    from wren.app import App


def run_server(app: "App", host: str, port: int) -> None:
    """Start uvicorn in the foreground with ``app`` as the ASGI callable.

    wren configures its own logging, so uvicorn's log config is left
    alone and the access log is on in development only.
    """
    try:
        import uvicorn
    except ModuleNotFoundError as exc:
        msg = "wren.App.run() needs uvicorn: pip install 'wren[server]'"
        raise ConfigurationError(msg) from exc

    uvicorn.run(
        app,
        host=host,
        port=port,
        log_config=None,
        log_level=app.config.log_level,
        access_log=app.config.debug,
    )
