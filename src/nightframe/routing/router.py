"""Compiled router with trie-based path matching.

Each controller gets one Router holding its RouteEntries. Patterns use
either Express-style ``:id`` or brace-style ``{id}`` / ``{id:int}``
parameters; ``*`` and ``{rest:path}`` consume the rest of the path.
"""

import re
from dataclasses import dataclass

from nightframe.routing.route import PathSegment, RouteEntry, RouteMatch

# (regex_pattern, python_type) for each supported converter
CONVERTERS: dict[str, tuple[str, type]] = {
    "str": (r"[^/]+", str),
    "int": (r"\d+", int),
    "float": (r"\d+(?:\.\d+)?", float),
    "path": (r".+", str),
}

ANY_METHOD = "ALL"


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route pattern into segments.

    Examples::

        "/users"             -> [PathSegment("users")]
        "/users/:id"         -> [PathSegment("users"), PathSegment(":id", is_param=True, ...)]
        "/users/{id:int}"    -> [PathSegment("users"), PathSegment("{id:int}", ..., param_type="int")]
        "/files/*"           -> [PathSegment("files"), PathSegment("*", ..., param_type="path")]
    """
    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if part == "*":
            segments.append(
                PathSegment(value=part, is_param=True, param_name="wildcard", param_type="path")
            )
        elif part.startswith(":") and len(part) > 1:
            segments.append(PathSegment(value=part, is_param=True, param_name=part[1:]))
        elif part.startswith("{") and part.endswith("}"):
            param_name, _, param_type = part[1:-1].partition(":")
            segments.append(
                PathSegment(
                    value=part,
                    is_param=True,
                    param_name=param_name,
                    param_type=param_type or "str",
                )
            )
        else:
            segments.append(PathSegment(value=part))
    return segments


class _TrieNode:
    """A node in the route trie. Mutable during compilation only."""

    __slots__ = ("catch_alls", "children", "entries_by_method", "param_children")

    def __init__(self) -> None:
        # Static segment children: "users" -> node
        self.children: dict[str, _TrieNode] = {}
        # Parameter children keyed by (name, type), tried in registration order
        self.param_children: dict[tuple[str, str], _ParamEdge] = {}
        # Catch-all edges (path converter / wildcard) keyed by name
        self.catch_alls: dict[str, _CatchAllEdge] = {}
        # Entries at this node, keyed by upper-case HTTP method
        self.entries_by_method: dict[str, RouteEntry] = {}


@dataclass(slots=True)
class _ParamEdge:
    param_name: str
    regex: re.Pattern[str]
    node: _TrieNode


@dataclass(slots=True)
class _CatchAllEdge:
    param_name: str
    entries_by_method: dict[str, RouteEntry]


def _select(entries: dict[str, RouteEntry], method: str) -> RouteEntry | None:
    """Pick the entry for *method*: exact, then ``all``, then GET for HEAD."""
    entry = entries.get(method) or entries.get(ANY_METHOD)
    if entry is None and method == "HEAD":
        entry = entries.get("GET")
    return entry


class Router:
    """Compiled router with trie-based path matching.

    Usage::

        router = Router()
        router.add(entry)            # RouteEntry("/users/:id", "get", ...)
        router.compile()
        match = router.match("GET", "/users/42")
    """

    __slots__ = ("_compiled", "_entries", "_root")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._entries: list[RouteEntry] = []
        self._compiled = False

    def add(self, entry: RouteEntry) -> None:
        """Add a route entry. Must be called before compile().

        A later entry for the same (method, pattern) replaces the earlier one.
        """
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        method = entry.http_method.upper()
        node = self._root

        for seg in parse_path(entry.url_pattern):
            if seg.is_param and seg.param_type == "path":
                # Catch-all: consumes rest of path, must be last segment
                name = seg.param_name or "path"
                catch_all = node.catch_alls.setdefault(
                    name, _CatchAllEdge(param_name=name, entries_by_method={})
                )
                catch_all.entries_by_method[method] = entry
                self._entries.append(entry)
                return

            if seg.is_param:
                key = (seg.param_name or "", seg.param_type)
                edge = node.param_children.get(key)
                if edge is None:
                    pattern, _ = CONVERTERS.get(seg.param_type, CONVERTERS["str"])
                    edge = _ParamEdge(
                        param_name=key[0],
                        regex=re.compile(f"^{pattern}$"),
                        node=_TrieNode(),
                    )
                    node.param_children[key] = edge
                node = edge.node
            else:
                node = node.children.setdefault(seg.value, _TrieNode())

        node.entries_by_method[method] = entry
        self._entries.append(entry)

    @property
    def entries(self) -> list[RouteEntry]:
        """All registered entries, in registration order."""
        return list(self._entries)

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch | None:
        """Match a request method and path.

        Returns ``None`` when nothing matches, so the caller can try the
        next router in the table.
        """
        parts = [p for p in path.strip("/").split("/") if p]
        return self._match_node(self._root, method.upper(), parts, 0, {})

    def _match_node(
        self,
        node: _TrieNode,
        method: str,
        parts: list[str],
        index: int,
        params: dict[str, str],
    ) -> RouteMatch | None:
        """Recursively match path parts: static, then param, then catch-all."""
        if index == len(parts):
            entry = _select(node.entries_by_method, method)
            if entry is not None:
                return RouteMatch(entry=entry, path_params=params)
            return None

        part = parts[index]

        if part in node.children:
            result = self._match_node(node.children[part], method, parts, index + 1, params)
            if result is not None:
                return result

        for edge in node.param_children.values():
            if edge.regex.match(part):
                new_params = {**params, edge.param_name: part}
                result = self._match_node(edge.node, method, parts, index + 1, new_params)
                if result is not None:
                    return result

        for catch_all in node.catch_alls.values():
            entry = _select(catch_all.entries_by_method, method)
            if entry is not None:
                remaining = "/".join(parts[index:])
                return RouteMatch(
                    entry=entry,
                    path_params={**params, catch_all.param_name: remaining},
                )

        return None
