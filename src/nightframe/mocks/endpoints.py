"""The ``/mocks/api`` endpoints and the writer for matched mocks.

Only reachable when ``e2e_testing_mode`` is on:

- ``POST``   register a mock (or a list of mocks); 200, empty body for any
             parseable JSON, 400 only when the body is not JSON
- ``GET``    log the registry at INFO; 200, empty body
- ``DELETE`` clear the registry; 200, empty body
"""

import json
import logging

from nightframe.errors import BadRequest, HTTPError
from nightframe.http.request import Request
from nightframe.http.response import JSON, ResponseWriter
from nightframe.mocks.store import MockStore
from nightframe.mocks.types import MockDefinition

logger = logging.getLogger("nightframe.mocks")

ALLOWED_METHODS = "GET, POST, DELETE"


async def handle_mocks_endpoint(
    request: Request,
    response: ResponseWriter,
    store: MockStore,
) -> None:
    """Serve one request to the mocks endpoint."""
    match request.method:
        case "POST":
            try:
                payload = await request.json()
            except ValueError as exc:
                msg = f"Mock payload is not valid JSON: {exc}"
                raise BadRequest(msg) from exc
            registered = store.register_payload(payload)
            logger.info("Registered %d mock(s)", len(registered))
        case "GET" | "HEAD":
            logger.info("Mock registry (%d): %s", len(store), json.dumps(store.snapshot()))
        case "DELETE":
            store.clear()
        case _:
            raise HTTPError(
                status=405,
                detail="Method Not Allowed",
                headers=(("Allow", ALLOWED_METHODS),),
            )
    await response.end()


async def write_mock_response(mock: MockDefinition, response: ResponseWriter) -> None:
    """Write a matched mock's canned status, headers, and body."""
    response.set_status(mock.status_code)
    for name, value in mock.response_headers.items():
        response.set_header(name, value)

    body = mock.response
    if isinstance(body, (dict, list)):
        await response.send(
            json.dumps(body),
            content_type=response.get_header("content-type") or JSON,
        )
    elif body is None:
        await response.end()
    else:
        await response.send(str(body))
