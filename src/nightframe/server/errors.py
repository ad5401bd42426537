"""Shared error path for nightframe requests.

Every failure raised while dispatching a request ends up here: route
misses (404), mock endpoint errors, and anything a hook or handler
raises. The error is mapped to a status code and written as a JSON
envelope::

    {"status": 404, "error": "Not Found", "message": "404 Not Found"}

Nothing is written if the response already went out.
"""

import logging
from http import HTTPStatus

from nightframe.errors import HTTPError
from nightframe.http.request import Request
from nightframe.http.response import ResponseWriter
from nightframe.server.logs import request_fields

logger = logging.getLogger("nightframe.server")

INTERNAL_ERROR_MESSAGE = "Internal Server Error"


def error_status(exc: BaseException) -> int:
    """Pick the status code for *exc*.

    ``HTTPError.status`` first, then an integer ``status`` or
    ``status_code`` attribute in the 4xx/5xx range, else 500.
    """
    if isinstance(exc, HTTPError):
        return exc.status
    for attr in ("status", "status_code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool) and 400 <= value < 600:
            return value
    return 500


def error_message(exc: BaseException, status: int, *, debug: bool = False) -> str:
    """Message for the envelope. 5xx details stay hidden unless *debug*."""
    if isinstance(exc, HTTPError) and exc.detail:
        return exc.detail
    if status < 500:
        return str(exc) or _reason(status)
    if debug:
        return f"{type(exc).__name__}: {exc}"
    return INTERNAL_ERROR_MESSAGE


def error_envelope(status: int, message: str) -> dict[str, object]:
    return {"status": status, "error": _reason(status), "message": message}


def _reason(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Error"


async def handle_error(
    exc: BaseException,
    request: Request,
    response: ResponseWriter,
    *,
    debug: bool = False,
) -> None:
    """Log *exc* and write the JSON error envelope if still possible."""
    status = error_status(exc)
    fields = {"url": request.url, "status": status, **request_fields(request)}
    if status >= 500:
        logger.exception(
            "%d %s %s",
            status,
            request.method,
            request.path,
            exc_info=exc,
            extra={"fields": fields},
        )
    else:
        logger.debug(
            "%d %s %s: %s", status, request.method, request.path, exc, extra={"fields": fields}
        )

    if response.headers_sent:
        logger.warning(
            "Response for %s %s already sent; dropping %s",
            request.method,
            request.path,
            type(exc).__name__,
        )
        return

    if isinstance(exc, HTTPError):
        for name, value in exc.headers:
            response.set_header(name, value)
    response.set_status(status)
    await response.json(error_envelope(status, error_message(exc, status, debug=debug)))
