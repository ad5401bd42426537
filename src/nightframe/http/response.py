"""Mutable response writer bound to an ASGI ``send`` channel.

Controllers, hooks, the mock matcher, and the error path all write
through the same ResponseWriter. Once the response start message has
gone out, ``headers_sent`` is True and every later write is refused,
so a response can never be sent twice.
"""

import json as json_module
from typing import Any

from nightframe._internal.asgi import Send

HTML = "text/html; charset=utf-8"
JSON = "application/json"
OCTET_STREAM = "application/octet-stream"


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


class ResponseWriter:
    """Accumulates status and headers, then writes one complete response.

    Usage inside a controller::

        async def post_activate(self, request, response, next):
            await response.set_status(202).json({"queued": True})
    """

    __slots__ = ("_headers", "_send", "_sent", "status")

    def __init__(self, send: Send) -> None:
        self._send = send
        self._headers: list[tuple[str, str]] = []
        self._sent = False
        self.status = 200

    @property
    def headers_sent(self) -> bool:
        """True once the response has been written to the client."""
        return self._sent

    # -- Chainable setters --

    def set_status(self, status: int) -> "ResponseWriter":
        self.status = status
        return self

    def set_header(self, name: str, value: str) -> "ResponseWriter":
        """Set a header, replacing any earlier value with the same name."""
        lowered = name.lower()
        self._headers = [(n, v) for n, v in self._headers if n.lower() != lowered]
        self._headers.append((name, value))
        return self

    def get_header(self, name: str) -> str | None:
        lowered = name.lower()
        for n, v in self._headers:
            if n.lower() == lowered:
                return v
        return None

    # -- Writers --

    async def send(self, body: str | bytes | None = b"", *, content_type: str | None = None) -> None:
        """Write the response with a raw body.

        ``str`` bodies default to ``text/html``, ``bytes`` bodies to
        ``application/octet-stream`` unless a Content-Type was set.

        Raises:
            RuntimeError: If the response was already sent.
        """
        if self._sent:
            msg = "Cannot write a response that has already been sent."
            raise RuntimeError(msg)

        if body is None:
            body = b""
        if isinstance(body, str):
            payload = body.encode("utf-8")
            default_type = HTML
        else:
            payload = body
            default_type = OCTET_STREAM

        if content_type is not None:
            self.set_header("Content-Type", content_type)
        elif self.get_header("content-type") is None:
            self.set_header("Content-Type", default_type)

        if not _body_allowed(self.status):
            payload = b""

        raw_headers: list[tuple[bytes, bytes]] = [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in self._headers
            if name.lower() != "content-length"
        ]
        raw_headers.append((b"content-length", str(len(payload)).encode("latin-1")))

        self._sent = True
        await self._send(
            {
                "type": "http.response.start",
                "status": self.status,
                "headers": raw_headers,
            }
        )
        await self._send({"type": "http.response.body", "body": payload})

    async def json(self, data: Any) -> None:
        """Serialise *data* as JSON and write it."""
        await self.send(json_module.dumps(data), content_type=JSON)

    async def end(self) -> None:
        """Write an empty body with the current status."""
        await self.send(b"", content_type=self.get_header("content-type") or HTML)
