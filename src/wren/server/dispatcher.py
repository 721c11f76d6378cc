"""Synchronous request pipeline.

Runs in a worker thread: route matching, content-type detection,
controller resolution and the controller lifecycle. Any exception is
turned into a response by the error boundary.
"""

import logging
from typing import TYPE_CHECKING

from wren.errors import HTTPError, NotFound
from wren.http.request import Request
from wren.http.response import Response
from wren.server.errors import handle_http_error, handle_internal_error
from wren.server.negotiation import detect_content_type

if TYPE_CHECKING:
    from wren.app import App

logger = logging.getLogger("wren.server")


def route_request(app: "App", request: Request) -> Request:
    """Match ``request`` against the router and attach the route parameters."""
    router = app.router
    if not router.match(request.path):
        raise NotFound(f"No route matches {request.path!r}")
    matched = router.matched_route
    logger.debug("%s %s -> %s", request.method, request.path, matched.name)
    return request.with_route(matched.params)


def dispatch(app: "App", request: Request) -> Response:
    """Resolve the routed controller and run its lifecycle."""
    spec = app.controllers.resolve(request.plugin, request.controller)
    response = Response().set_content_type(detect_content_type(request.extension, request.headers))
    controller = spec.cls(app, request, response, spec)
    return controller.dispatch()


def process_request(app: "App", request: Request) -> Response:
    """Route, dispatch and catch. Always returns a response."""
    try:
        request = route_request(app, request)
        return dispatch(app, request)
    except HTTPError as exc:
        return handle_http_error(exc, request, app)
    except Exception as exc:
        return handle_internal_error(exc, request, app)
