"""Route table: walk the routes directory, load controllers, build routers.

The table is an ordered list of :class:`ControllerRouter`, one per
controller file, in directory-walk order. The request handler tries
each router in turn. A controller can decline a request it matched by
calling ``next()``, which hands the request to the routers after it.

Building the table twice from the same directory yields the same
routes, but controller classes are re-imported each time.
"""

import logging
from dataclasses import dataclass, replace
from pathlib import Path

from nightframe.config import AppConfig
from nightframe.controllers.discovery import load_controller, walk_controllers
from nightframe.controllers.types import ControllerDefinition
from nightframe.routing.conventions import compose_route_uri
from nightframe.routing.route import RouteEntry, RouteMatch
from nightframe.routing.router import Router

logger = logging.getLogger("nightframe.controllers")


@dataclass(frozen=True, slots=True)
class ControllerRouter:
    """A compiled router holding every route of one controller."""

    definition: ControllerDefinition
    router: Router

    @property
    def entries(self) -> list[RouteEntry]:
        return self.router.entries

    def match(self, method: str, path: str) -> RouteMatch | None:
        return self.router.match(method, path)


def bind_settings(cls: type, settings: AppConfig) -> type:
    """Return a subclass of *cls* exposing ``settings`` as a class attribute.

    The user's class is left untouched, so loading the same module into
    two apps with different settings does not leak between them.
    """
    return type(
        cls.__name__,
        (cls,),
        {
            "settings": settings,
            "__module__": cls.__module__,
            "__qualname__": cls.__qualname__,
        },
    )


def build_controller_router(definition: ControllerDefinition) -> ControllerRouter:
    """Compile one controller's methods into a Router."""
    router = Router()
    for descriptor in definition.methods:
        pattern = compose_route_uri(definition.base_path, descriptor, definition.name)
        router.add(
            RouteEntry(
                url_pattern=pattern,
                http_method=descriptor.http_method,
                controller=definition,
                method_name=descriptor.method_name,
            )
        )
        logger.debug(
            "Route %s %s -> %s.%s",
            descriptor.http_method.upper(),
            pattern,
            definition.controller_class.__name__,
            descriptor.method_name,
        )
    router.compile()
    return ControllerRouter(definition=definition, router=router)


def build_route_table(routes_dir: str | Path, settings: AppConfig) -> list[ControllerRouter]:
    """Discover every controller under *routes_dir* and build the table.

    Raises:
        ControllerLoadError: If any controller fails to load. Nothing
            is partially registered.
    """
    table: list[ControllerRouter] = []
    for source in walk_controllers(routes_dir):
        definition = load_controller(source)
        if definition is None:
            continue
        bound = replace(
            definition,
            controller_class=bind_settings(definition.controller_class, settings),
        )
        table.append(build_controller_router(bound))

    logger.debug(
        "Built route table from %s: %d controllers, %d routes",
        routes_dir,
        len(table),
        sum(len(r.entries) for r in table),
    )
    return table
