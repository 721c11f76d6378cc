"""Kida environment setup and app binding.

Creates a kida Environment from wren's AppConfig and binds user-registered
filters and globals. The environment is created once when the app freezes
and shared by every request.
"""

from collections.abc import Callable, Mapping
from typing import Any

from kida import Environment, FileSystemLoader

from wren.config import AppConfig


def create_environment(
    config: AppConfig,
    filters: Mapping[str, Callable[..., Any]],
    globals_: Mapping[str, Any],
) -> Environment:
    """Create a kida Environment from app configuration.

    Templates reload from disk in development only.
    """
    env = Environment(
        loader=FileSystemLoader(str(config.template_dir)),
        autoescape=config.autoescape,
        auto_reload=config.debug,
        trim_blocks=config.trim_blocks,
        lstrip_blocks=config.lstrip_blocks,
    )
    if filters:
        env.update_filters(dict(filters))
    for name, value in globals_.items():
        env.add_global(name, value)
    return env


class ViewBuilder:
    """The render collaborator used by controllers and the error boundary.

    Usage::

        views = ViewBuilder(env)
        html = views.render("blog/show.html", {"post": post})
    """

    __slots__ = ("env",)

    def __init__(self, env: Environment) -> None:
        self.env = env

    def render(self, template: str, view: Mapping[str, Any]) -> str:
        return self.env.get_template(template).render(dict(view))

    def render_string(self, source: str, view: Mapping[str, Any]) -> str:
        return self.env.from_string(source).render(dict(view))
