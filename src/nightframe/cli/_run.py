"""``nightframe run``: build the app from settings and serve it."""

import argparse
import logging
import sys

from nightframe.cli._resolve import resolve_app
from nightframe.errors import ConfigurationError, ControllerLoadError
from nightframe.server.logs import configure_log_files


def run_server(args: argparse.Namespace) -> None:
    """Start the pounce server for the app described by *args*.

    Configuration and controller errors are reported on stderr and
    exit with status 1 before the server starts.
    """
    try:
        app = resolve_app(args)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    logging.basicConfig(
        level=app.config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if app.config.log_files != "off":
        configure_log_files(app.config.log_folder, errors_only=app.config.log_files == "error")

    try:
        app.run()
    except ControllerLoadError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
