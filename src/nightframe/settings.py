"""Settings loading: ``app-settings.json`` → :class:`AppConfig`.

The settings file holds one object per environment::

    {
        "default": {"port": 3000, "app": {"name": "shop"}},
        "test": {"e2eTestingMode": true, "app": {"cookieSecret": "${COOKIE_SECRET}"}}
    }

The active environment is picked from ``env``, then ``NIGHTFRAME_ENV``,
then ``"default"``. Non-default environments inherit every key they do
not set from ``default`` (deep merge). ``${VAR}`` placeholders in string
values are replaced with environment variables; unset variables become
empty strings, and boolean fields accept the strings ``"true"``/``"false"``
that interpolation produces. ``$PORT`` supplies the port when the
settings do not.
"""

import copy
import dataclasses
import json
import os
import re
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

from nightframe.config import LOG_FILE_MODES, AppConfig, SecurityHeadersConfig
from nightframe.errors import ConfigurationError

SETTINGS_FILE = "app-settings.json"
DEFAULT_ENV = "default"
ENV_VAR = "NIGHTFRAME_ENV"
PORT_ENV_VAR = "PORT"

_PLACEHOLDER_RE = re.compile(r"\$\{(\w+)\}")
_CAMEL_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

_CONFIG_FIELDS = frozenset(f.name for f in dataclasses.fields(AppConfig)) - {"extra"}
_TUPLE_FIELDS = frozenset({"reload_include", "reload_dirs"})
_BOOL_FIELDS = frozenset(f.name for f in dataclasses.fields(AppConfig) if f.type is bool)
_SECURITY_FIELDS = frozenset(f.name for f in dataclasses.fields(SecurityHeadersConfig))

_TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "off", ""})


def load_settings(
    path: str | Path | None = None,
    *,
    env: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """Read, resolve, and interpolate the settings file into an AppConfig.

    Args:
        path: Settings file. Defaults to ``app-settings.json`` in the
            working directory.
        env: Environment name. Defaults to ``$NIGHTFRAME_ENV`` or
            ``"default"``.
        environ: Variables used for ``${VAR}`` interpolation and
            environment selection. Defaults to ``os.environ``.

    Raises:
        ConfigurationError: If the file is missing, unreadable, not a
            JSON object, or the environment is not defined in it.
    """
    environ = os.environ if environ is None else environ
    settings_path = Path(path) if path is not None else Path.cwd() / SETTINGS_FILE

    if not settings_path.is_file():
        msg = (
            f"Missing application settings file {settings_path}. "
            f"Create {SETTINGS_FILE} in the current folder or pass --settings."
        )
        raise ConfigurationError(msg)

    try:
        raw = json.loads(settings_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        msg = f"Cannot read settings file {settings_path}: {exc}"
        raise ConfigurationError(msg) from exc

    if not isinstance(raw, dict):
        msg = f"Settings file {settings_path} must contain a JSON object of environments."
        raise ConfigurationError(msg)

    env_name = env or environ.get(ENV_VAR) or DEFAULT_ENV
    resolved = resolve_environment(raw, env_name)
    interpolated = interpolate(resolved, environ)
    return config_from_mapping(interpolated, environ=environ)


def resolve_environment(raw: Mapping[str, Any], env_name: str) -> dict[str, Any]:
    """Pick one environment's settings, inheriting from ``default``."""
    available = [key for key, value in raw.items() if isinstance(value, dict)]
    if env_name not in available:
        msg = (
            f"Invalid environment specified: {env_name!r}. "
            f"Available environments are: {', '.join(available) or '(none)'}"
        )
        raise ConfigurationError(msg)

    settings = copy.deepcopy(raw[env_name])
    if env_name != DEFAULT_ENV and isinstance(raw.get(DEFAULT_ENV), dict):
        settings = deep_merge(raw[DEFAULT_ENV], settings)
    return settings


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Return *base* updated recursively with *override* (neither is mutated)."""
    merged: dict[str, Any] = copy.deepcopy(dict(base))
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def interpolate(value: Any, environ: Mapping[str, str]) -> Any:
    """Replace ``${VAR}`` in every string nested inside *value*."""
    if isinstance(value, str):
        return _PLACEHOLDER_RE.sub(lambda m: environ.get(m.group(1)) or "", value)
    if isinstance(value, dict):
        return {key: interpolate(item, environ) for key, item in value.items()}
    if isinstance(value, list):
        return [interpolate(item, environ) for item in value]
    return value


def snake_case(key: str) -> str:
    """``e2eTestingMode`` → ``e2e_testing_mode``; snake_case passes through."""
    return _CAMEL_RE.sub("_", key).lower()


def config_from_mapping(
    settings: Mapping[str, Any],
    *,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """Map a resolved settings object onto AppConfig fields.

    Known keys (camelCase or snake_case) become typed fields; ``app.name``
    becomes ``app_name`` and ``logging.file.{enable,folder}`` become
    ``log_files``/``log_folder``. Every other top-level key is kept in
    ``extra``. When the settings leave ``port`` unset (missing, null, 0,
    or empty), ``$PORT`` from *environ* is used.

    Raises:
        ConfigurationError: If a port, boolean, log file mode, or
            security header value cannot be interpreted.
    """
    kwargs: dict[str, Any] = {}
    extra: dict[str, Any] = {}

    for key, value in settings.items():
        name = snake_case(key)
        if name in _CONFIG_FIELDS:
            kwargs[name] = tuple(value) if name in _TUPLE_FIELDS else value
        else:
            extra[key] = value

    app_section = settings.get("app")
    if isinstance(app_section, dict) and "app_name" not in kwargs:
        name = app_section.get("name")
        if name:
            kwargs["app_name"] = str(name)

    logging_section = settings.get("logging")
    if isinstance(logging_section, dict):
        _apply_logging_section(logging_section, kwargs)

    if not kwargs.get("port"):
        kwargs.pop("port", None)
        if environ is not None and environ.get(PORT_ENV_VAR):
            kwargs["port"] = environ[PORT_ENV_VAR]
    if "port" in kwargs:
        try:
            kwargs["port"] = int(kwargs["port"])
        except (TypeError, ValueError) as exc:
            msg = f"Invalid port number specified: {kwargs['port']!r}"
            raise ConfigurationError(msg) from exc

    for name in _BOOL_FIELDS & kwargs.keys():
        kwargs[name] = to_bool(name, kwargs[name])
    if "log_files" in kwargs:
        kwargs["log_files"] = file_log_mode(kwargs["log_files"])
    if "security_headers" in kwargs:
        kwargs["security_headers"] = security_headers_from(kwargs["security_headers"])

    return AppConfig(**kwargs, extra=MappingProxyType(extra))


def _apply_logging_section(section: Mapping[str, Any], kwargs: dict[str, Any]) -> None:
    file_section = section.get("file")
    if not isinstance(file_section, dict):
        return
    enabled = file_section.get("enable") or file_section.get("enabled")
    if enabled is not None and "log_files" not in kwargs:
        kwargs["log_files"] = enabled
    folder = file_section.get("folder")
    if folder and "log_folder" not in kwargs:
        kwargs["log_folder"] = folder


def to_bool(name: str, value: Any) -> bool:
    """Coerce a settings value to bool.

    Interpolated strings count: ``"false"``, ``"0"``, and ``""`` are
    false, ``"true"`` and ``"1"`` are true.

    Raises:
        ConfigurationError: If *value* is not recognisably boolean.
    """
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    msg = f"Invalid boolean for {name}: {value!r}"
    raise ConfigurationError(msg)


def file_log_mode(value: Any) -> str:
    """Map ``logging.file.enable`` onto a mode: ``"ERROR"`` is ``"error"``, true is ``"all"``."""
    if isinstance(value, str) and value.strip().lower() in LOG_FILE_MODES:
        return value.strip().lower()
    return "all" if to_bool("log_files", value) else "off"


def security_headers_from(value: Any) -> SecurityHeadersConfig | None:
    """``false`` disables the headers, ``true`` keeps the defaults, an object overrides them."""
    if value is None or isinstance(value, SecurityHeadersConfig):
        return value
    if isinstance(value, Mapping):
        options = {snake_case(key): str(item) for key, item in value.items()}
        unknown = sorted(options.keys() - _SECURITY_FIELDS)
        if unknown:
            msg = f"Unknown security header settings: {', '.join(unknown)}"
            raise ConfigurationError(msg)
        return SecurityHeadersConfig(**options)
    return SecurityHeadersConfig() if to_bool("security_headers", value) else None
