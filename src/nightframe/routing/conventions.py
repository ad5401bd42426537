"""Method-name conventions: identifier → verb + URL fragment → URL pattern.

Three addressing styles per controller method::

    routes/users.py
        def get(...)                  GET  /users           (conventional)
        def get_by_id(...)            GET  /users           (suffix is naming only)
        routes = {"get /active": ...} GET  /users/active    (relative override)
        routes = {"get ^/health": ...} GET /health          (strict override)

Identifiers that cannot be Python method names (they contain spaces or
slashes) are declared in the controller's ``routes`` table, which maps
identifier → method name and goes through the same parser.
"""

import inspect
import re
from collections.abc import Iterator

from nightframe.routing.route import MethodDescriptor

HTTP_VERBS: tuple[str, ...] = ("get", "post", "put", "delete", "head", "patch", "options", "all")

# Lifecycle hooks, never routes
RESERVED_NAMES = frozenset({"before_request", "after_request", "beforeRequest", "afterRequest"})

HOME_CONTROLLER = "index"
STRICT_MARKER = "^"

_WHITESPACE_RE = re.compile(r"\s+")
# Split before every upper-case letter and on underscores
_WORD_BOUNDARY_RE = re.compile(r"(?=[A-Z])|_")
_SLASHES_RE = re.compile(r"/{2,}")


def parse_method_name(identifier: str, method_name: str | None = None) -> MethodDescriptor | None:
    """Parse a method identifier into a :class:`MethodDescriptor`.

    Args:
        identifier: ``"get"``, ``"getProjectsById"``, ``"get_projects"``,
            ``"get /projects/:id"``, ``"/projects/:id"``,
            ``"post ^/webhooks/stripe"``.
        method_name: The attribute to invoke. Defaults to *identifier*
            (the conventional case, where the two are the same).

    Returns:
        The descriptor, or ``None`` when the leading verb is not an HTTP
        verb (``"getaway"``, ``"allowed"``): such names are helpers.
    """
    method_name = method_name or identifier
    parts = _WHITESPACE_RE.split(identifier.strip())
    route: str | None = None

    if len(parts) > 1:
        verb = parts[0]
        if _is_route_fragment(parts[1]):
            route = parts[1]
    elif _is_route_fragment(parts[0]):
        verb = "get"
        route = parts[0]
    else:
        verb = _WORD_BOUNDARY_RE.split(parts[0], maxsplit=1)[0]

    verb = verb.lower()
    if verb not in HTTP_VERBS:
        return None
    return MethodDescriptor(http_method=verb, method_name=method_name, route=route)


def _is_route_fragment(token: str) -> bool:
    return token.startswith("/") or token.startswith(STRICT_MARKER + "/")


def compose_route_uri(base_uri: str, descriptor: MethodDescriptor, controller_name: str) -> str:
    """Build the final URL pattern for one controller method.

    ``[base_uri, controller_name?, route?]`` joined with ``/`` and with
    runs of slashes collapsed. The ``index`` controller adds no segment;
    a strict route replaces everything before it.
    """
    segments = [base_uri]
    if controller_name != HOME_CONTROLLER:
        segments.append(controller_name)

    route = descriptor.route
    if route and route.startswith(STRICT_MARKER):
        segments = [route[len(STRICT_MARKER) :]]
    elif route:
        segments.append(route)

    return _SLASHES_RE.sub("/", "/".join(segments))


def is_eligible_name(name: str) -> bool:
    """True if *name* starts with an HTTP verb and is not a lifecycle hook."""
    return name not in RESERVED_NAMES and name.startswith(HTTP_VERBS)


def iter_candidate_methods(cls: type, *, stop_at: tuple[type, ...] = ()) -> Iterator[str]:
    """Yield callable attribute names of *cls*, most-derived first.

    Walks the MRO up to ``object``, skipping any class in *stop_at* (the
    framework's own base classes) without hiding mixins listed after it.
    Each name is yielded once.
    """
    seen: set[str] = set()
    for klass in cls.__mro__:
        if klass is object:
            break
        if klass in stop_at:
            continue
        for name, value in vars(klass).items():
            if name in seen or name.startswith("__"):
                continue
            seen.add(name)
            if isinstance(value, (staticmethod, classmethod)):
                value = value.__func__
            if inspect.isfunction(value):
                yield name
