"""ASGI handler — translates ASGI scope/messages to wren types.

The only component that touches raw ASGI directly. The body is read on
the event loop; the synchronous pipeline then runs in a worker thread
under a copy of the current context, so the router's matched-route
variable never leaks between concurrent requests.
"""

import contextvars
import logging
from typing import TYPE_CHECKING

import anyio.to_thread

from wren._internal.asgi import Receive, Scope, Send
from wren.errors import HTTPError
from wren.http.request import Request
from wren.server.dispatcher import process_request
from wren.server.errors import handle_http_error
from wren.server.sender import send_response

if TYPE_CHECKING:
    from wren.app import App

logger = logging.getLogger("wren.server")


async def handle_request(scope: Scope, receive: Receive, send: Send, *, app: "App") -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    try:
        request = await Request.from_asgi(scope, receive, max_body=app.config.max_content_length)
    except HTTPError as exc:
        # Body rejected before dispatch; answer from the bare scope.
        await send_response(handle_http_error(exc, Request.from_scope(scope), app), send)
        return

    sessions = app.sessions
    if sessions is not None:
        request.session.update(sessions.load(request))

    context = contextvars.copy_context()
    response = await anyio.to_thread.run_sync(context.run, process_request, app, request)

    if sessions is not None:
        sessions.save(request, response, request.session)
    await send_response(response, send)
