"""The mock registry.

One MockStore per App, passed in explicitly. Match-then-remove for
one-shot mocks runs under a single lock, so two concurrent requests
cannot both consume the same non-persistent mock.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

import anyio

from nightframe.errors import MockNormalizationError
from nightframe.mocks.matching import candidate_matches, normalize_postdata
from nightframe.mocks.types import MockDefinition

logger = logging.getLogger("nightframe.mocks")


class MockStore:
    """Ordered registry of :class:`MockDefinition` objects.

    Usage::

        store = MockStore()
        store.register(MockDefinition(url="/a", method="POST", postdata={"x": 1}))
        mock = await store.match("POST", "/a", b'{"x": 1}')
    """

    __slots__ = ("_lock", "_mocks")

    def __init__(self, mocks: Iterable[MockDefinition] = ()) -> None:
        self._mocks: list[MockDefinition] = list(mocks)
        self._lock: anyio.Lock | None = None  # Created lazily on first use

    def __len__(self) -> int:
        return len(self._mocks)

    def register(self, definition: MockDefinition) -> MockDefinition:
        """Append *definition*; earlier registrations take precedence."""
        self._mocks.append(definition)
        logger.debug(
            "Registered mock %s %s -> %d (persist=%s)",
            definition.method.upper(),
            definition.url,
            definition.status_code,
            definition.persist,
        )
        return definition

    def register_payload(self, payload: Any) -> list[MockDefinition]:
        """Register one mock or a list of mocks from their JSON form.

        Never fails on parsed JSON: entries that are not objects are
        skipped with a warning.
        """
        items = payload if isinstance(payload, list) else [payload]
        registered: list[MockDefinition] = []
        for item in items:
            if not isinstance(item, Mapping):
                logger.warning("Skipping mock definition that is not an object: %r", item)
                continue
            registered.append(self.register(MockDefinition.from_payload(item)))
        return registered

    async def match(self, method: str, url: str, body: Any = None) -> MockDefinition | None:
        """Return the first mock answering this request, or ``None``.

        A matched mock with ``persist=False`` is removed before returning.
        """
        if not self._mocks:
            return None

        body_invalid = False
        try:
            canonical = normalize_postdata(body)
        except MockNormalizationError as exc:
            logger.warning("Could not normalise request body for %s %s: %s", method, url, exc)
            canonical = None
            body_invalid = True

        if self._lock is None:
            self._lock = anyio.Lock()

        async with self._lock:
            for index, candidate in enumerate(self._mocks):
                if not candidate_matches(
                    candidate, method, url, canonical, body_invalid=body_invalid
                ):
                    continue
                if not candidate.persist:
                    del self._mocks[index]
                logger.debug("Mock matched %s %s -> %d", method, url, candidate.status_code)
                return candidate
        return None

    def clear(self) -> None:
        self._mocks.clear()
        logger.debug("Cleared mock registry")

    def snapshot(self) -> list[dict[str, Any]]:
        """Plain-dict copy of the registry, in match order."""
        return [mock.to_dict() for mock in self._mocks]
