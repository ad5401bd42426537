"""Access logging and the optional JSON-lines log files.

Every request gets one ``nightframe.access`` line carrying the tracing
headers a proxy or caller may set (``X-Correlation-Id``, ``X-Request-Id``,
``X-Trace-Id``, ``X-Via``) and the user agent. The same values travel on
the record as ``record.fields`` so file handlers can write them as JSON.

With ``log_files`` enabled the CLI attaches two file handlers::

    <log_folder>/access.log   nightframe.access, INFO and up
    <log_folder>/error.log    nightframe.server, ERROR and up

``log_files="error"`` writes error.log only.
"""

import json
import logging
import time
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from nightframe.http.request import Request
from nightframe.http.response import ResponseWriter

access_logger = logging.getLogger("nightframe.access")
error_logger = logging.getLogger("nightframe.server")

ACCESS_LOG_FILE = "access.log"
ERROR_LOG_FILE = "error.log"

# Record field -> request header; absent headers become ""
TRACE_HEADERS: tuple[tuple[str, str], ...] = (
    ("correlation_id", "x-correlation-id"),
    ("request_id", "x-request-id"),
    ("trace_id", "x-trace-id"),
    ("via", "x-via"),
    ("user_agent", "user-agent"),
)


def request_fields(request: Request) -> dict[str, str]:
    """Tracing fields taken from *request*'s headers."""
    return {name: request.headers.get(header, "") for name, header in TRACE_HEADERS}


def log_access(request: Request, response: ResponseWriter, *, app_name: str = "") -> None:
    """Write the access line for a finished request."""
    elapsed_ms = (time.perf_counter() - request.state["start_time"]) * 1000
    fields: dict[str, Any] = {
        "service": app_name,
        "method": request.method,
        "url": request.url,
        "status": response.status,
        "time_taken_ms": round(elapsed_ms, 1),
        "http_version": request.http_version,
        **request_fields(request),
    }
    access_logger.info(
        '%s %s %d %.1fms correlation_id=%s request_id=%s trace_id=%s user_agent="%s"',
        request.method,
        request.url,
        response.status,
        elapsed_ms,
        fields["correlation_id"] or "-",
        fields["request_id"] or "-",
        fields["trace_id"] or "-",
        fields["user_agent"] or "-",
        extra={"fields": fields},
    )


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record: time, level, ``record.fields``, message."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
        }
        entry.update(getattr(record, "fields", {}))
        entry["message"] = record.getMessage()
        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            entry["error"] = f"{type(exc).__name__}: {exc}"
        return json.dumps(entry, default=str)


def configure_log_files(folder: str | Path, *, errors_only: bool = False) -> list[logging.Handler]:
    """Attach the access.log / error.log handlers under *folder*.

    Creates *folder* if needed. Calling again for the same folder reuses
    the handlers already attached.
    """
    root = Path(folder).resolve()
    root.mkdir(parents=True, exist_ok=True)

    targets = [(ERROR_LOG_FILE, error_logger, logging.ERROR)]
    if not errors_only:
        targets.insert(0, (ACCESS_LOG_FILE, access_logger, logging.INFO))

    handlers: list[logging.Handler] = []
    for filename, logger, level in targets:
        path = root / filename
        existing = next(
            (
                h
                for h in logger.handlers
                if isinstance(h, logging.FileHandler) and Path(h.baseFilename) == path
            ),
            None,
        )
        if existing is not None:
            handlers.append(existing)
            continue

        handler = logging.FileHandler(path, encoding="utf-8")
        handler.setLevel(level)
        handler.setFormatter(JsonLineFormatter())
        logger.addHandler(handler)
        if not logger.isEnabledFor(level):
            logger.setLevel(level)
        handlers.append(handler)
    return handlers
