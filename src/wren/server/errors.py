"""Error boundary for wren requests.

Every exception escaping the dispatch pipeline ends up here and becomes a
Response:

- development: a debug page with the message and traceback
- production: a log record whose level follows the status (4xx INFO,
  5xx ERROR, anything else CRITICAL), then the ``error/{status}.html``
  template, or plain text when that template cannot be rendered
"""

import http
import logging
from typing import TYPE_CHECKING

from wren.errors import HTTPError
from wren.http.request import Request
from wren.http.response import Response
from wren.logs import log_level_for_status
from wren.server.debug_page import render_debug_page, render_debug_text
from wren.server.negotiation import detect_content_type

if TYPE_CHECKING:
    from wren.app import App

logger = logging.getLogger("wren.server")


def _title(status: int) -> str:
    try:
        return http.HTTPStatus(status).phrase
    except ValueError:
        return "Error"


def _wants_html(request: Request) -> bool:
    return detect_content_type(request.extension, request.headers) == "text/html"


def error_response(exc: Exception, status: int, request: Request, app: "App") -> Response:
    """Build the response for ``exc`` as seen by the client with ``status``."""
    code = exc.status if isinstance(exc, HTTPError) else 0
    level = log_level_for_status(code)
    logger.log(
        level,
        "%d %s %s — %s",
        status,
        request.method,
        request.path,
        exc,
        exc_info=exc if level >= logging.ERROR else None,
    )

    response = Response(status=status)
    if isinstance(exc, HTTPError):
        for name, value in exc.headers:
            response.set_header(name, value)

    if app.config.debug:
        if _wants_html(request):
            return response.set_content_type("text/html; charset=utf-8").set_body(render_debug_page(exc, request))
        return response.set_content_type("text/plain; charset=utf-8").set_body(render_debug_text(exc, request))

    title = _title(status)
    views = app.views
    if views is not None:
        try:
            body = views.render(f"error/{status}.html", {"title": title, "exception": exc, "status": status})
        except Exception:
            logger.debug("Error template for %d could not be rendered", status, exc_info=True)
        else:
            return response.set_content_type("text/html; charset=utf-8").set_body(body)
    return response.set_content_type("text/plain; charset=utf-8").set_body(f"{status} {title}")


def handle_http_error(exc: HTTPError, request: Request, app: "App") -> Response:
    """Map an HTTPError to a response carrying its own status."""
    return error_response(exc, exc.status, request, app)


def handle_internal_error(exc: Exception, request: Request, app: "App") -> Response:
    """Handle unexpected exceptions as 500 errors."""
    return error_response(exc, 500, request, app)
