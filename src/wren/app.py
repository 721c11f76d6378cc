"""wren application class.

Mutable during setup (routes, controllers, services, template filters).
Frozen on the first ASGI call, by ``app.run()``, or by ``app.freeze()``.
"""

import inspect
import logging
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from wren._internal.asgi import Receive, Scope, Send
from wren.config import AppConfig
from wren.errors import ConfigurationError
from wren.http.sessions import SessionConfig, SessionStore
from wren.registry import ControllerRegistry
from wren.routing.router import Router
from wren.routing.urls import UrlBuilder
from wren.server.handler import handle_request
from wren.templating.integration import ViewBuilder, create_environment

logger = logging.getLogger("wren.app")

T = TypeVar("T")
ControllerT = TypeVar("ControllerT", bound=type)


class App:
    """The wren application.

    Usage::

        app = App(AppConfig(template_dir="templates"))
        app.connect("default", "{controller}/{action}")

        @app.controller
        class BlogController(Controller):
            def show_action(self, slug):
                ...

    Thread safety:
        Setup is single-threaded (module import time). The freeze
        transition uses a lock with a double check so exactly one thread
        builds the template environment, even when several worker threads
        see the first request at once. After freezing everything here is
        read-only.
    """

    __slots__ = (
        "_controllers",
        "_freeze_lock",
        "_frozen",
        "_providers",
        "_router",
        "_sessions",
        "_shutdown_hooks",
        "_startup_hooks",
        "_template_filters",
        "_template_globals",
        "_url",
        "_views",
        "config",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._router = Router()
        self._url = UrlBuilder(self._router)
        self._controllers = ControllerRegistry()
        self._providers: dict[type, Callable[[], Any]] = {}
        self._template_filters: dict[str, Callable[..., Any]] = {}
        self._template_globals: dict[str, Any] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._sessions: SessionStore | None = (
            SessionStore(SessionConfig.from_app_config(self.config)) if self.config.secret_key else None
        )
        self._views: ViewBuilder | None = None
        self._frozen = False
        self._freeze_lock = threading.Lock()

    # -- Setup --

    def connect(self, name: str, pattern: str, defaults: dict[str, Any] | None = None) -> "App":
        """Add a named route. Earlier routes win when several match."""
        self._check_not_frozen()
        self._router.connect(name, pattern, defaults)
        return self

    def register_controller(self, cls: ControllerT, *, plugin: str | None = None) -> ControllerT:
        self._check_not_frozen()
        self._controllers.register(cls, plugin=plugin)
        return cls

    def controller(self, cls: ControllerT | None = None, *, plugin: str | None = None) -> Any:
        """Register a controller class; usable bare or with ``plugin=``.

        ::

            @app.controller
            class HomeController(Controller): ...

            @app.controller(plugin="admin")
            class UsersController(Controller): ...
        """
        if cls is not None:
            return self.register_controller(cls, plugin=plugin)

        def decorator(target: ControllerT) -> ControllerT:
            return self.register_controller(target, plugin=plugin)

        return decorator

    def provide(self, annotation: type, factory: Callable[[], Any]) -> None:
        """Register a zero-argument factory for a service type.

        Controllers look services up with ``self.app.resolve(Type)``;
        tests swap a fake in by providing the same type again.
        """
        self._check_not_frozen()
        self._providers[annotation] = factory

    def resolve(self, annotation: type[T]) -> T:
        """Call the factory registered for ``annotation``."""
        factory = self._providers.get(annotation)
        if factory is None:
            msg = f"No provider registered for {annotation.__qualname__}"
            raise ConfigurationError(msg)
        return factory()

    def template_filter(self, name: str | None = None) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a kida template filter."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            self._template_filters[name or func.__name__] = func
            return func

        return decorator

    def template_global(self, name: str | None = None) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a kida template global."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            self._template_globals[name or func.__name__] = func
            return func

        return decorator

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Run ``func`` (sync or async) during ASGI lifespan startup."""
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Run ``func`` (sync or async) during ASGI lifespan shutdown."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Runtime collaborators --

    @property
    def router(self) -> Router:
        return self._router

    @property
    def url(self) -> UrlBuilder:
        return self._url

    @property
    def controllers(self) -> ControllerRegistry:
        return self._controllers

    @property
    def sessions(self) -> SessionStore | None:
        """The cookie session store; ``None`` keeps sessions request-local."""
        return self._sessions

    @property
    def views(self) -> ViewBuilder | None:
        """Template renderer; ``None`` until frozen or without a template dir."""
        return self._views

    @property
    def frozen(self) -> bool:
        return self._frozen

    # -- Serving --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Freeze the app and serve it with uvicorn."""
        from wren.server.serve import run_server

        self.freeze()
        run_server(self, host or self.config.host, port or self.config.port)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self.freeze()
        await handle_request(scope, receive, send, app=self)

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup so configuration errors surface before
        the first request, then runs the registered hooks.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self.freeze()
                    for hook in self._startup_hooks:
                        result = hook()
                        if inspect.isawaitable(result):
                            await result
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                for hook in self._shutdown_hooks:
                    result = hook()
                    if inspect.isawaitable(result):
                        await result
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def freeze(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        if not len(self._router):
            msg = "No routes connected; call app.connect() before serving."
            raise ConfigurationError(msg)

        template_dir = Path(self.config.template_dir)
        if template_dir.is_dir():
            template_globals = {"url": self._url.build, **self._template_globals}
            env = create_environment(self.config, self._template_filters, template_globals)
            self._views = ViewBuilder(env)
        else:
            logger.info("Template directory %s not found; HTML rendering disabled", template_dir)

        self._router.freeze()
        self._frozen = True
        logger.debug("App frozen with %d routes and %d controllers", len(self._router), len(self._controllers))

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, controllers, and services before calling app.run()."
            )
            raise RuntimeError(msg)
