"""Per-request controller lifecycle.

Received → Instantiated → before_request → handler → after_request →
coerced and sent. Hooks and handlers may be sync or async; every call
goes through :func:`invoke`. Exceptions are not caught here: they
propagate to the shared error path in the ASGI handler.
"""

import time
from typing import Any

from nightframe._internal.invoke import invoke, resolve
from nightframe.http.request import Request
from nightframe.http.response import ResponseWriter
from nightframe.routing.route import RouteEntry

BEFORE_HOOKS = ("before_request", "beforeRequest")
AFTER_HOOKS = ("after_request", "afterRequest")


class _Pass:
    """Sentinel returned when a controller declined the request via ``next()``."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "PASS"


PASS = _Pass()


class Next:
    """The ``next`` callable handed to controllers and hooks.

    ``next(exc)`` raises *exc* into the error path. ``next()`` declines
    the request: the rest of this controller's lifecycle is skipped and
    the request moves on to the next router in the table.
    """

    __slots__ = ("passed",)

    def __init__(self) -> None:
        self.passed = False

    def __call__(self, exc: BaseException | None = None) -> None:
        if exc is not None:
            raise exc
        self.passed = True


def _find_hook(instance: Any, names: tuple[str, ...]) -> Any:
    for name in names:
        hook = getattr(instance, name, None)
        if callable(hook):
            return hook
    return None


async def run_lifecycle(
    entry: RouteEntry,
    request: Request,
    response: ResponseWriter,
) -> Any:
    """Run one controller method for a matched route and send its result.

    Returns :data:`PASS` when the controller called ``next()`` without
    an error, otherwise ``None`` once the response has been written.
    """
    request.state.setdefault("start_time", time.perf_counter())

    next_ = Next()
    instance = entry.controller.instantiate(request, response, next_)

    before = _find_hook(instance, BEFORE_HOOKS)
    if before is not None:
        await invoke(before, request, response, next_)
        if next_.passed:
            return PASS

    result = await invoke(getattr(instance, entry.method_name), request, response, next_)
    if next_.passed:
        return PASS

    after = _find_hook(instance, AFTER_HOOKS)
    if after is not None:
        await invoke(after, result, request, response, next_)
        if next_.passed:
            return PASS

    await send_result(result, response)
    return None


async def send_result(result: Any, response: ResponseWriter) -> None:
    """Coerce a handler's return value into a response.

    ``dict``, ``list`` and ``tuple`` become JSON, ``bytes`` go out raw,
    ``None`` is an empty body, anything else is sent as ``str(value)``.
    Does nothing if the handler already wrote the response itself.
    """
    value = await resolve(result)
    if response.headers_sent:
        return

    match value:
        case dict() | list() | tuple():
            await response.json(value)
        case bytes() | bytearray():
            await response.send(bytes(value))
        case None:
            await response.end()
        case _:
            await response.send(str(value))
