"""Routing — ordered pattern routes and reverse URL building.

Routes are connected during setup, compiled to case-insensitive regular
expressions, and scanned in registration order. ``UrlBuilder`` runs the
table backwards to turn parameter maps into URLs.
"""

from wren.routing.route import MatchedRoute, RouteTemplate
from wren.routing.router import Router
from wren.routing.urls import UrlBuilder, slugify

__all__ = ["MatchedRoute", "RouteTemplate", "Router", "UrlBuilder", "slugify"]
