"""App construction from CLI arguments.

Shared by ``nightframe run`` and ``nightframe routes``: loads the
settings file, applies command-line overrides, and builds the App.
"""

import argparse
import dataclasses
import os
from pathlib import Path
from typing import Any

from nightframe.app import App
from nightframe.config import AppConfig
from nightframe.settings import SETTINGS_FILE, config_from_mapping, load_settings


def resolve_config(args: argparse.Namespace) -> AppConfig:
    """Build the AppConfig for a CLI invocation.

    An explicit ``--settings`` file must exist. Without one, the
    working directory's ``app-settings.json`` is used when present,
    otherwise the defaults with ``$PORT`` applied.

    Raises:
        ConfigurationError: If the settings cannot be loaded.
    """
    if args.settings is not None or Path(SETTINGS_FILE).is_file():
        config = load_settings(args.settings, env=args.env)
    else:
        config = config_from_mapping({}, environ=os.environ)

    overrides: dict[str, Any] = {}
    if args.routes is not None:
        overrides["routes_dir"] = args.routes
    if getattr(args, "host", None) is not None:
        overrides["host"] = args.host
    if getattr(args, "port", None) is not None:
        overrides["port"] = args.port
    if getattr(args, "enable_e2e_testing", False):
        overrides["e2e_testing_mode"] = True
    if getattr(args, "verbose", False):
        overrides["log_level"] = "debug"
    return dataclasses.replace(config, **overrides) if overrides else config


def resolve_app(args: argparse.Namespace) -> App:
    """Build an App from CLI arguments."""
    return App(resolve_config(args))
