"""Data models for discovered controllers.

Built once at app startup during discovery; immutable afterwards.
Rebuilding the route table means walking the directory again.
"""

import inspect
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from nightframe.routing.route import MethodDescriptor


@dataclass(frozen=True, slots=True)
class ControllerSource:
    """A controller file found by the directory walk, not yet imported.

    Attributes:
        path: Filesystem path to the ``.py`` file.
        base_uri: URI segments accumulated from directory nesting,
            starting with ``"/"``. ``index`` directories add nothing.
        name: File stem; becomes a path segment unless it is ``index``.
    """

    path: Path
    base_uri: tuple[str, ...]
    name: str

    @property
    def base_path(self) -> str:
        return "/".join(self.base_uri)


class ConstructorStyle(Enum):
    """How a controller class is instantiated per request."""

    # cls(request, response, next)
    BOUND = "bound"
    # cls(), then request/response/next assigned as attributes
    BARE = "bare"


@dataclass(frozen=True, slots=True)
class ControllerDefinition:
    """A loaded controller class and the route metadata derived from it.

    Attributes:
        name: File stem (``users.py`` → ``"users"``).
        base_uri: URI segments from directory nesting.
        controller_class: The class instantiated per request (with
            ``settings`` bound).
        source: File the class was loaded from.
        methods: Parsed route methods, computed once at load time.
        constructor: Instantiation style, checked at load time.
    """

    name: str
    base_uri: tuple[str, ...]
    controller_class: type
    source: Path
    methods: tuple[MethodDescriptor, ...] = ()
    constructor: ConstructorStyle = ConstructorStyle.BOUND

    @property
    def base_path(self) -> str:
        return "/".join(self.base_uri)

    def instantiate(self, request: Any, response: Any, next: Any) -> Any:
        """Create the per-request controller instance."""
        if self.constructor is ConstructorStyle.BOUND:
            return self.controller_class(request, response, next)
        instance = self.controller_class()
        instance.request = request
        instance.response = response
        instance.next = next
        return instance


def constructor_style(cls: type) -> ConstructorStyle | None:
    """Work out how *cls* can be constructed, or ``None`` if it can't.

    A controller must accept ``(request, response, next)`` positionally
    or take no arguments at all.
    """
    try:
        signature = inspect.signature(cls)
    except (TypeError, ValueError):
        return None

    try:
        signature.bind(None, None, None)
    except TypeError:
        pass
    else:
        return ConstructorStyle.BOUND

    try:
        signature.bind()
    except TypeError:
        return None
    return ConstructorStyle.BARE
