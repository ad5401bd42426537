"""``nightframe routes``: list discovered routes.

Builds the app from settings and prints every route with method,
path, and handler, in dispatch order.
"""

import argparse
import sys

from nightframe.cli._resolve import resolve_app
from nightframe.errors import ConfigurationError, ControllerLoadError


def run_routes(args: argparse.Namespace) -> None:
    """Print a METHOD / PATH / HANDLER table for the app's controllers."""
    try:
        routes = resolve_app(args).routes
    except (ConfigurationError, ControllerLoadError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if not routes:
        print("No routes registered.")
        return

    rows = [(entry.http_method.upper(), entry.url_pattern, entry.handler_name) for entry in routes]

    # Column widths ("METHOD" and "PATH" headers are the minimum)
    max_method = max(6, *(len(r[0]) for r in rows))
    max_path = max(4, *(len(r[1]) for r in rows))

    fmt = f"{{:<{max_method}}}  {{:<{max_path}}}  {{}}"
    print(fmt.format("METHOD", "PATH", "HANDLER"))
    sep_len = max_method + max_path + 4 + max(len(r[2]) for r in rows)
    print("-" * min(sep_len, 80))
    for method, path, handler in rows:
        print(fmt.format(method, path, handler))
