"""Invoke helpers: call sync or async callables uniformly.

Controller hooks and handlers can be ``def`` or ``async def``, and a
sync handler may still hand back an awaitable (a coroutine, a future,
a task). Everything that calls user code goes through here so the
sync/async check lives in exactly one place.

Usage::

    from nightframe._internal.invoke import invoke

    result = await invoke(instance.get, request, response, next)
"""

import inspect
from typing import Any


async def resolve(value: Any) -> Any:
    """Await *value* if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and resolve whatever it returns."""
    return await resolve(func(*args, **kwargs))
