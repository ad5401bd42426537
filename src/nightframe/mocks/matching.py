"""Mock matching rules: body normalisation and partial comparison.

Bodies are compared in a canonical JSON form (sorted keys, no
whitespace), so ``{"b": 1, "a": 2}`` and ``{"a":2,"b":1}`` are equal.
"""

import json
import logging
from typing import Any

from nightframe.errors import MockNormalizationError
from nightframe.mocks.types import MockDefinition

logger = logging.getLogger("nightframe.mocks")

# Accepts any value in partial matching
WILDCARD = ""


def canonical_json(data: Any) -> str:
    return json.dumps(data, sort_keys=True, separators=(",", ":"))


def normalize_postdata(data: Any) -> str | None:
    """Canonicalise a body or mock post-data.

    ``None`` and empty bodies give ``None``. Strings and bytes are parsed
    and re-serialised; anything else is serialised directly.

    Raises:
        MockNormalizationError: If *data* is not valid JSON.
    """
    if data is None or data in ("", b""):
        return None
    try:
        if isinstance(data, (bytes, bytearray)):
            data = data.decode("utf-8")
        if isinstance(data, str):
            data = json.loads(data)
        return canonical_json(data)
    except (TypeError, ValueError) as exc:
        msg = f"Body is not valid JSON: {exc}"
        raise MockNormalizationError(msg) from exc


def _same_value(expected: Any, actual: Any) -> bool:
    # JSON true and 1 are different values
    if isinstance(expected, bool) or isinstance(actual, bool):
        return type(expected) is type(actual) and expected == actual
    return expected == actual


def is_partial_match(expected: Any, actual: Any) -> bool:
    """True if every key of *expected* is matched in *actual*.

    Keys missing from *expected* are ignored; an expected value of
    ``""`` accepts anything; nested objects are compared the same way.
    Non-object values must be equal.
    """
    if not isinstance(expected, dict):
        return _same_value(expected, actual)
    if not isinstance(actual, dict):
        return False
    for key, value in expected.items():
        if key not in actual:
            return False
        if value == WILDCARD:
            continue
        if not is_partial_match(value, actual[key]):
            return False
    return True


def candidate_matches(
    candidate: MockDefinition,
    method: str,
    url: str,
    body: str | None,
    *,
    body_invalid: bool = False,
) -> bool:
    """Decide whether *candidate* answers a request.

    Args:
        candidate: Registered mock.
        method: Request method.
        url: Request path plus query string.
        body: Canonical request body, ``None`` when the request had none.
        body_invalid: The request had a body that could not be normalised.
            Such a request only matches mocks without post-data.
    """
    if candidate.url != url or candidate.method.lower() != method.lower():
        return False
    if candidate.postdata in (None, ""):
        return True
    if body_invalid:
        return False
    # A body-less request still matches a mock that declares post-data
    if body is None:
        return True

    try:
        expected = normalize_postdata(candidate.postdata)
    except MockNormalizationError as exc:
        logger.warning("Mock %s %s has invalid postdata: %s", candidate.method, candidate.url, exc)
        return False

    if expected is None or expected == body:
        return True
    if candidate.match_empty:
        return is_partial_match(json.loads(expected), json.loads(body))
    return False
