"""Nightframe CLI: dev server and route listing.

Entry point registered as ``nightframe`` in ``pyproject.toml``::

    [project.scripts]
    nightframe = "nightframe.cli:main"
"""

import argparse
import sys


def _add_app_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--settings",
        default=None,
        help="Settings file (default: ./app-settings.json when present)",
    )
    parser.add_argument(
        "--env",
        default=None,
        help="Settings environment (default: $NIGHTFRAME_ENV or 'default')",
    )
    parser.add_argument("--routes", default=None, help="Controllers directory")


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``nightframe`` command."""
    parser = argparse.ArgumentParser(
        prog="nightframe",
        description="Nightframe: convention-based controllers for ASGI.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- nightframe run ---------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Start the development server")
    _add_app_arguments(run_parser)
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument(
        "--enable-e2e-testing",
        action="store_true",
        help="Serve /mocks/api and answer matching requests from registered mocks",
    )
    run_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log at DEBUG level",
    )

    # -- nightframe routes ------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List discovered routes")
    _add_app_arguments(routes_parser)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "run":
        from nightframe.cli._run import run_server

        run_server(args)
    elif args.command == "routes":
        from nightframe.cli._routes import run_routes

        run_routes(args)
