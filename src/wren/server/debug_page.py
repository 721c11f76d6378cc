"""Self-contained debug error page.

Rendered in development only. Uses plain f-strings, not kida, so that a
broken template setup cannot hide the error it caused.

Shows the exception type and message, the traceback with source context
(application frames highlighted), and the routed request.
"""

import html
import linecache
import os
import traceback
import types
from typing import Any

from wren.http.request import Request

_SENSITIVE_HEADERS = frozenset({"authorization", "cookie", "proxy-authorization", "x-api-key"})

_CSS = """\
body { font-family: ui-monospace, Menlo, Consolas, monospace; background: #1a1b26; color: #a9b1d6;
       padding: 2rem; font-size: 14px; line-height: 1.5; }
h1 { color: #f7768e; font-size: 1.3rem; }
h2 { color: #7aa2f7; font-size: 1.05rem; border-bottom: 1px solid #2f3549; margin-top: 1.5rem; }
.message { color: #e0af68; white-space: pre-wrap; }
.frame { border: 1px solid #2f3549; border-radius: 6px; margin: 0.5rem 0; }
.frame.app { border-color: #7aa2f7; }
.frame-header { background: #24283b; padding: 0.3rem 0.8rem; }
.frame-header .func { color: #bb9af7; }
pre { margin: 0; padding: 0.3rem 0.8rem; overflow-x: auto; }
.error-line { background: rgba(247, 118, 142, 0.15); color: #f7768e; }
table { border-collapse: collapse; }
td { padding: 0.1rem 1rem 0.1rem 0; vertical-align: top; }
td.label { color: #7aa2f7; }
"""


def _esc(value: Any) -> str:
    return html.escape(str(value), quote=True)


def _is_app_frame(filename: str) -> bool:
    if "site-packages" in filename or filename.startswith("<"):
        return False
    return not filename.startswith(os.path.dirname(os.__file__))


def _frames(tb: types.TracebackType | None) -> list[dict[str, Any]]:
    frames: list[dict[str, Any]] = []
    while tb is not None:
        code = tb.tb_frame.f_code
        lineno = tb.tb_lineno
        context = []
        for number in range(max(1, lineno - 3), lineno + 4):
            line = linecache.getline(code.co_filename, number, tb.tb_frame.f_globals)
            if line:
                context.append((number, line.rstrip()))
        frames.append(
            {
                "filename": code.co_filename,
                "lineno": lineno,
                "function": code.co_name,
                "context": context,
                "is_app": _is_app_frame(code.co_filename),
            }
        )
        tb = tb.tb_next
    return frames


def _request_rows(request: Request) -> list[tuple[str, str]]:
    rows = [("Method", request.method), ("URL", request.url)]
    if request.route_params:
        routed = {key: value for key, value in request.route_params.items() if value is not None}
        rows.append(("Route", ", ".join(f"{key}={value}" for key, value in routed.items())))
    for name, value in request.headers.items():
        rows.append((name, "••••••••" if name in _SENSITIVE_HEADERS else value))
    return rows


def render_debug_text(exc: BaseException, request: Request) -> str:
    """Plain-text variant for non-HTML clients (curl, JSON APIs)."""
    trace = "".join(traceback.format_exception(exc))
    return f"{type(exc).__name__}: {exc}\n\n{request.method} {request.url}\n\n{trace}"


def render_debug_page(exc: BaseException, request: Request) -> str:
    """Full HTML page describing ``exc`` raised while handling ``request``."""
    parts = [
        "<!DOCTYPE html><html><head><meta charset='utf-8'>",
        f"<title>{_esc(type(exc).__name__)}</title><style>{_CSS}</style></head><body>",
        f"<h1>{_esc(type(exc).__module__)}.{_esc(type(exc).__qualname__)}</h1>",
        f"<p class='message'>{_esc(exc)}</p>",
    ]

    cause = exc.__cause__ or exc.__context__
    if cause is not None:
        parts.append(f"<p>Caused by <b>{_esc(type(cause).__name__)}</b>: {_esc(cause)}</p>")

    parts.append("<h2>Traceback</h2>")
    for frame in _frames(exc.__traceback__):
        css = "frame app" if frame["is_app"] else "frame"
        parts.append(
            f"<div class='{css}'><div class='frame-header'>{_esc(frame['filename'])}:{frame['lineno']}"
            f" in <span class='func'>{_esc(frame['function'])}</span></div>"
        )
        for number, line in frame["context"]:
            marker = " class='error-line'" if number == frame["lineno"] else ""
            parts.append(f"<pre{marker}>{number:>5}  {_esc(line)}</pre>")
        parts.append("</div>")

    parts.append("<h2>Request</h2><table>")
    for label, value in _request_rows(request):
        parts.append(f"<tr><td class='label'>{_esc(label)}</td><td>{_esc(value)}</td></tr>")
    parts.append("</table></body></html>")
    return "".join(parts)
