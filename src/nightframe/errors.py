"""Nightframe exception hierarchy.

Shared across discovery, routing, the request lifecycle, and the mock
store so every module raises and catches the same types.
"""

from dataclasses import dataclass
from http import HTTPStatus


class NightframeError(Exception):
    """Base for all nightframe-specific errors."""


class ConfigurationError(NightframeError):
    """Raised when settings are missing or invalid.

    Typically raised by ``load_settings()`` before the app is built.
    """


class ControllerLoadError(NightframeError):
    """A controller file could not be loaded or has the wrong shape.

    Fatal at route-table build time: it aborts ``App._freeze()`` and
    therefore startup. Never raised per request.
    """

    def __init__(self, message: str, *, source: str | None = None) -> None:
        super().__init__(message)
        self.source = source


class MockNormalizationError(NightframeError, ValueError):
    """A mock's post-data or a request body is not valid JSON.

    Recovered locally by the mock matcher: the candidate simply does
    not match.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(NightframeError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, the mock endpoints, or controllers. The ASGI
    handler catches these and writes the JSON error envelope.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    @property
    def reason(self) -> str:
        """Standard reason phrase for ``status`` (empty if unknown)."""
        try:
            return HTTPStatus(self.status).phrase
        except ValueError:
            return ""

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: no route (and no mock) matched the request."""

    def __init__(self, detail: str = "404 Not Found") -> None:
        super().__init__(status=404, detail=detail)


class BadRequest(HTTPError):  # noqa: N818
    """400: the request body could not be understood."""

    def __init__(self, detail: str = "Bad Request") -> None:
        super().__init__(status=400, detail=detail)
