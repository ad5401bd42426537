"""ASGI handler: translates ASGI scope/messages to nightframe types.

The only component that touches raw ASGI HTTP messages. Builds the
Request and ResponseWriter with the security headers already set,
consults the mock store in e2e mode, tries each controller router in
table order, and sends failures through the shared error path.
"""

import time
from collections.abc import Sequence

from nightframe._internal.asgi import Receive, Scope, Send
from nightframe.config import AppConfig
from nightframe.errors import NotFound
from nightframe.http.request import Request
from nightframe.http.response import ResponseWriter
from nightframe.mocks.endpoints import handle_mocks_endpoint, write_mock_response
from nightframe.mocks.store import MockStore
from nightframe.routing.table import ControllerRouter
from nightframe.server.errors import handle_error
from nightframe.server.lifecycle import PASS, run_lifecycle
from nightframe.server.logs import log_access
from nightframe.server.security import apply_security_headers


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    routers: Sequence[ControllerRouter],
    mock_store: MockStore,
    config: AppConfig,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    request.state["start_time"] = time.perf_counter()
    response = apply_security_headers(ResponseWriter(send), config.security_headers)

    try:
        await _dispatch(request, response, routers=routers, mock_store=mock_store, config=config)
    except Exception as exc:
        await handle_error(exc, request, response, debug=config.debug)

    if config.log_requests:
        log_access(request, response, app_name=config.app_name)


async def _dispatch(
    request: Request,
    response: ResponseWriter,
    *,
    routers: Sequence[ControllerRouter],
    mock_store: MockStore,
    config: AppConfig,
) -> None:
    if config.e2e_testing_mode:
        if request.path == config.mocks_path:
            await handle_mocks_endpoint(request, response, mock_store)
            return
        if len(mock_store):
            mock = await mock_store.match(request.method, request.url, await request.body())
            if mock is not None:
                await write_mock_response(mock, response)
                return

    for controller_router in routers:
        match = controller_router.match(request.method, request.path)
        if match is None:
            continue
        outcome = await run_lifecycle(
            match.entry, request.with_path_params(match.path_params), response
        )
        if outcome is not PASS:
            return

    raise NotFound()
