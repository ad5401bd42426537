"""Mock definition model."""

import logging
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from typing import Any

logger = logging.getLogger("nightframe.mocks")

# Wire name → field name, for the camelCase keys test harnesses send
_WIRE_KEYS = {
    "statusCode": "status_code",
    "responseHeaders": "response_headers",
    "matchEmpty": "match_empty",
}


@dataclass(slots=True)
class MockDefinition:
    """A canned response for requests matching ``(method, url[, postdata])``.

    Attributes:
        url: Exact request path plus query string (``/a?x=1``).
        method: HTTP method, compared case-insensitively.
        status_code: Status of the canned response.
        response_headers: Headers of the canned response.
        response: Body. Dicts and lists are sent as JSON.
        postdata: Expected request body (JSON string or structure).
        match_empty: Fall back to partial matching, where only the keys
            listed in ``postdata`` are compared and ``""`` accepts any value.
        persist: When false the mock is removed after its first match.
    """

    url: str
    method: str = "GET"
    status_code: int = 200
    response_headers: dict[str, str] = field(default_factory=dict)
    response: Any = ""
    postdata: Any = None
    match_empty: bool = False
    persist: bool = True

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "MockDefinition":
        """Build a definition from its JSON form.

        Accepts camelCase or snake_case keys and ignores unknown ones.
        ``persist`` is true unless the payload says exactly ``false``.
        A ``statusCode`` that is not an integer becomes 200 and
        ``responseHeaders`` that are not an object become ``{}``; both
        are logged as warnings.
        """
        data = {_WIRE_KEYS.get(key, key): value for key, value in payload.items()}
        url = str(data.get("url") or "")

        status_code = data.get("status_code", 200)
        if isinstance(status_code, bool) or not isinstance(status_code, (int, str)):
            status_code = _invalid(url, "statusCode", status_code, 200)
        else:
            try:
                status_code = int(status_code)
            except ValueError:
                status_code = _invalid(url, "statusCode", status_code, 200)

        headers = data.get("response_headers") or {}
        if not isinstance(headers, Mapping):
            headers = _invalid(url, "responseHeaders", headers, {})

        return cls(
            url=url,
            method=str(data.get("method") or "GET"),
            status_code=status_code,
            response_headers={str(k): str(v) for k, v in headers.items()},
            response=data.get("response", ""),
            postdata=data.get("postdata"),
            match_empty=bool(data.get("match_empty", False)),
            persist=data.get("persist") is not False,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _invalid(url: str, key: str, value: Any, default: Any) -> Any:
    logger.warning("Mock for %r has invalid %s %r; using %r", url, key, value, default)
    return default
