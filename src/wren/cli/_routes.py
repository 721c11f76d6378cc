"""``wren routes`` — list connected routes in match order."""

import argparse
import sys

from wren.cli._resolve import resolve_app


def _defaults(configured: dict[str, object]) -> str:
    return ", ".join(f"{key}={value}" for key, value in configured.items())


def run_routes(args: argparse.Namespace) -> None:
    """Print NAME, PATTERN and DEFAULTS for every route of ``args.app``."""
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    routes = app.router.routes
    if not routes:
        print("No routes connected.")
        return

    rows = [(route.name, "/" + route.pattern, _defaults(route.configured)) for route in routes]
    max_name = max(4, *(len(r[0]) for r in rows))
    max_pattern = max(7, *(len(r[1]) for r in rows))

    fmt = f"{{:<{max_name}}}  {{:<{max_pattern}}}  {{}}"
    print(fmt.format("NAME", "PATTERN", "DEFAULTS"))
    sep_len = max_name + max_pattern + 4 + max((len(r[2]) for r in rows), default=0)
    print("-" * min(sep_len, 80))
    for name, pattern, defaults in rows:
        print(fmt.format(name, pattern, defaults))
