"""Components — hooks plugged into the controller lifecycle."""

from wren.components.base import BeforeFilter, BeforeRedirect, BeforeRender, Component
from wren.components.csrf import CsrfComponent, CsrfTokenStore
from wren.components.flash import FlashComponent
from wren.components.html import HtmlComponent

__all__ = [
    "BeforeFilter",
    "BeforeRedirect",
    "BeforeRender",
    "Component",
    "CsrfComponent",
    "CsrfTokenStore",
    "FlashComponent",
    "HtmlComponent",
]
