"""wren — a small MVC web framework.

Ordered pattern routes, a reverse URL builder, convention-based
controllers with a fixed lifecycle, and pluggable components.

Basic usage::

    from wren import App, Controller

    app = App()
    app.connect("default", "{controller}/{action}")

    @app.controller
    class HelloController(Controller):
        def world_action(self, name="world"):
            self.set("greeting", f"Hello, {name}!")

    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "BadRequest",
    "ConfigurationError",
    "Controller",
    "HTTPError",
    "NotFound",
    "Request",
    "Response",
    "SecurityError",
    "UpstreamError",
    "WrenError",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import wren`` fast while providing a clean top-level API.
    """
    if name == "App":
        from wren.app import App

        return App

    if name == "AppConfig":
        from wren.config import AppConfig

        return AppConfig

    if name == "Controller":
        from wren.controller import Controller

        return Controller

    if name == "Request":
        from wren.http.request import Request

        return Request

    if name == "Response":
        from wren.http.response import Response

        return Response

    if name in (
        "BadRequest",
        "ConfigurationError",
        "HTTPError",
        "NotFound",
        "SecurityError",
        "UpstreamError",
        "WrenError",
    ):
        import wren.errors

        return getattr(wren.errors, name)

    msg = f"module 'wren' has no attribute {name!r}"
    raise AttributeError(msg)
