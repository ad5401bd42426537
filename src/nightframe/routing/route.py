"""Frozen dataclasses describing parsed methods, routes, and matches."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nightframe.controllers.types import ControllerDefinition


@dataclass(frozen=True, slots=True)
class MethodDescriptor:
    """A controller method parsed by the naming convention.

    ``route`` is the optional URL fragment carried by the identifier
    (``"get /active"`` → ``"/active"``). A fragment starting with ``^/``
    is strict: it replaces the controller's base URI entirely.
    """

    http_method: str
    method_name: str
    route: str | None = None

    @property
    def is_strict(self) -> bool:
        return self.route is not None and self.route.startswith("^/")


@dataclass(frozen=True, slots=True)
class RouteEntry:
    """One routable (method, pattern) pair bound to a controller method."""

    url_pattern: str
    http_method: str
    controller: "ControllerDefinition"
    method_name: str

    @property
    def handler_name(self) -> str:
        """``ClassName.method`` for listings and logs."""
        return f"{self.controller.controller_class.__name__}.{self.method_name}"


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route pattern.

    Static:   ``users``                       (is_param=False)
    Param:    ``:id`` or ``{id}``              (param_name="id")
    Typed:    ``{id:int}``                     (param_type="int")
    Wildcard: ``*`` or ``{rest:path}``         (param_type="path")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    entry: RouteEntry
    path_params: dict[str, str]
