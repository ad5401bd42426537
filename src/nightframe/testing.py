"""Async test client for nightframe applications.

Sends requests through the ASGI interface directly, no sockets, and
captures what the app wrote::

    async with TestClient(app) as client:
        response = await client.post("/users/activate", json={"id": 1})
        assert response.status == 200
        assert response.json() == {"activated": 1}
"""

import json as json_module
from dataclasses import dataclass
from typing import Any

from nightframe.app import App
from nightframe.http.headers import Headers


@dataclass(frozen=True, slots=True)
class TestResponse:
    """A response captured from the ASGI ``send`` channel."""

    __test__ = False  # Tell pytest this is not a test class

    status: int
    headers: Headers
    body: bytes
    # Number of http.response.start messages; anything but 1 is a bug
    start_count: int = 1

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    def json(self) -> Any:
        return json_module.loads(self.body)


class TestClient:
    __test__ = False  # Tell pytest this is not a test class
    """Async test client for nightframe applications.

    Entering the context builds the route table, so a broken controller
    fails the test at setup rather than on the first request.
    """

    __slots__ = ("app",)

    def __init__(self, app: App) -> None:
        self.app = app

    async def __aenter__(self) -> "TestClient":
        self.app._ensure_frozen()
        return self

    async def __aexit__(self, *args: object) -> None:
        return None

    async def get(self, path: str, *, headers: dict[str, str] | None = None) -> TestResponse:
        """Send a GET request."""
        return await self.request("GET", path, headers=headers)

    async def post(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | str | None = None,
        json: Any = None,
    ) -> TestResponse:
        """Send a POST request. ``json`` is serialised and wins over ``body``."""
        return await self.request("POST", path, headers=headers, body=body, json=json)

    async def put(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | str | None = None,
        json: Any = None,
    ) -> TestResponse:
        """Send a PUT request."""
        return await self.request("PUT", path, headers=headers, body=body, json=json)

    async def patch(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | str | None = None,
        json: Any = None,
    ) -> TestResponse:
        """Send a PATCH request."""
        return await self.request("PATCH", path, headers=headers, body=body, json=json)

    async def delete(self, path: str, *, headers: dict[str, str] | None = None) -> TestResponse:
        """Send a DELETE request."""
        return await self.request("DELETE", path, headers=headers)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | str | None = None,
        json: Any = None,
    ) -> TestResponse:
        """Send an arbitrary request through the ASGI app."""
        path_part, _, query_string = path.partition("?")

        request_headers = dict(headers or {})
        if json is not None:
            body = json_module.dumps(json)
            request_headers.setdefault("content-type", "application/json")
        if isinstance(body, str):
            body = body.encode("utf-8")
        request_body = body or b""

        raw_headers = [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in request_headers.items()
        ]

        scope: dict[str, Any] = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": method.upper(),
            "path": path_part,
            "raw_path": path_part.encode("latin-1"),
            "query_string": query_string.encode("latin-1"),
            "root_path": "",
            "headers": raw_headers,
            "server": ("testserver", 80),
            "client": ("127.0.0.1", 0),
        }

        body_sent = False

        async def receive() -> dict[str, Any]:
            nonlocal body_sent
            if not body_sent:
                body_sent = True
                return {"type": "http.request", "body": request_body, "more_body": False}
            return {"type": "http.disconnect"}

        start_count = 0
        status = 0
        response_headers: list[tuple[bytes, bytes]] = []
        body_parts: list[bytes] = []

        async def send(message: dict[str, Any]) -> None:
            nonlocal start_count, status, response_headers
            if message["type"] == "http.response.start":
                start_count += 1
                status = message["status"]
                response_headers = list(message.get("headers", []))
            elif message["type"] == "http.response.body":
                body_parts.append(message.get("body", b""))

        await self.app(scope, receive, send)

        return TestResponse(
            status=status,
            headers=Headers(response_headers),
            body=b"".join(body_parts),
            start_count=start_count,
        )
