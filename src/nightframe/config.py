"""Application configuration.

AppConfig is a frozen dataclass: immutable after creation, IDE-autocompletable,
no string-key dict lookups for the settings the framework itself reads.
Application-specific keys live in ``extra``.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

LOG_FILE_MODES = ("off", "all", "error")


def _empty_extra() -> Mapping[str, Any]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class SecurityHeadersConfig:
    """Security headers written on every response.

    All values are applied as-is. Use standard header values.
    """

    x_frame_options: str = "SAMEORIGIN"
    x_content_type_options: str = "nosniff"
    referrer_policy: str = "no-referrer"


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(port=3000, e2e_testing_mode=True)

    Most apps build it from ``app-settings.json`` via
    :func:`nightframe.settings.load_settings`.
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # Reload (development mode, requires debug=True)
    reload_include: tuple[str, ...] = ()
    reload_dirs: tuple[str, ...] = ()

    app_name: str = ""

    # Controllers
    routes_dir: str | Path = "routes"

    # Templates (Controller.render)
    template_dir: str | Path = "templates"
    autoescape: bool = True

    # End-to-end testing: enables /mocks/api and mock interception
    e2e_testing_mode: bool = False
    mocks_path: str = "/mocks/api"

    # Security headers; None sends none
    security_headers: SecurityHeadersConfig | None = field(default_factory=SecurityHeadersConfig)

    # Logging
    log_requests: bool = True
    log_level: str = "info"
    # JSON-lines access.log / error.log under log_folder: "off", "all", or "error"
    log_files: str = "off"
    log_folder: str | Path = "logs"

    # Everything else from the settings file, read-only
    extra: Mapping[str, Any] = field(default_factory=_empty_extra)

    def get(self, key: str, default: Any = None) -> Any:
        """Look up an application-specific setting from ``extra``."""
        return self.extra.get(key, default)
