"""Filesystem controller discovery for the routes/ directory.

Walks the routes directory tree and discovers controller modules:

- every ``.py`` file is a controller module; its stem is the
  controller name (``users.py`` → ``/users``)
- directory names become URI segments, except ``index``, which adds
  nothing (``routes/index/foo.py`` behaves like ``routes/foo.py``)
- files starting with ``_`` are private helpers and are skipped
- directories starting with ``_`` or ``.`` (``__pycache__``) are skipped

Each module must define exactly one controller class, or name it with a
module-level ``__controller__`` attribute. Anything else is a
:class:`ControllerLoadError`, which aborts startup.
"""

import importlib.util
import inspect
import logging
import sys
from pathlib import Path
from types import ModuleType

from nightframe.controllers.base import Controller
from nightframe.controllers.types import (
    ControllerDefinition,
    ControllerSource,
    constructor_style,
)
from nightframe.errors import ControllerLoadError
from nightframe.routing.conventions import (
    HOME_CONTROLLER,
    is_eligible_name,
    iter_candidate_methods,
    parse_method_name,
)
from nightframe.routing.route import MethodDescriptor

logger = logging.getLogger("nightframe.controllers")

CONTROLLER_SUFFIX = ".py"
MODULE_PREFIX = "nightframe_controllers"


def is_private_controller(name: str) -> bool:
    return name.startswith("_")


def walk_controllers(routes_dir: str | Path) -> list[ControllerSource]:
    """Walk a routes directory and list every controller file.

    Creates the directory (and parents) when it does not exist, in
    which case the result is empty.

    Entries are visited in sorted order, files and directories
    interleaved. Ordering between equal URL patterns coming from
    different files is not a guarantee.
    """
    root = Path(routes_dir)
    if not root.is_dir():
        root.mkdir(parents=True, exist_ok=True)
        logger.debug("Created routes directory %s", root)
        return []

    results: list[ControllerSource] = []
    _walk_directory(root.resolve(), base_uri=("/",), results=results)
    return results


def _walk_directory(
    directory: Path,
    *,
    base_uri: tuple[str, ...],
    results: list[ControllerSource],
) -> None:
    for item in sorted(directory.iterdir()):
        if item.is_dir():
            if item.name.startswith(("_", ".")):
                continue
            segments = base_uri if item.name == HOME_CONTROLLER else (*base_uri, item.name)
            _walk_directory(item, base_uri=segments, results=results)
        elif item.suffix == CONTROLLER_SUFFIX:
            results.append(ControllerSource(path=item, base_uri=base_uri, name=item.stem))


def load_controller(source: ControllerSource) -> ControllerDefinition | None:
    """Import a controller file and validate its class.

    Returns ``None`` for private controllers (name starts with ``_``).

    Raises:
        ControllerLoadError: If the module fails to import, does not
            define exactly one controller class, or the class cannot be
            constructed per request.
    """
    if is_private_controller(source.name):
        return None

    module = _import_module(source)
    cls = _find_controller_class(module, source)

    style = constructor_style(cls)
    if style is None:
        msg = (
            f"Controller {cls.__name__} in {source.path} must accept "
            "(request, response, next) or no constructor arguments."
        )
        raise ControllerLoadError(msg, source=str(source.path))

    definition = ControllerDefinition(
        name=source.name,
        base_uri=source.base_uri,
        controller_class=cls,
        source=source.path,
        methods=controller_methods(cls),
        constructor=style,
    )
    logger.debug(
        "Loaded controller %s from %s (%d routes)",
        cls.__name__,
        source.path,
        len(definition.methods),
    )
    return definition


def controller_methods(cls: type) -> tuple[MethodDescriptor, ...]:
    """Build the route metadata table for a controller class.

    Explicit ``routes`` entries come first, in declaration order,
    followed by conventionally named methods. A method referenced by
    the ``routes`` table is not also registered by convention.
    """
    table = getattr(cls, "routes", None) or {}
    if not isinstance(table, dict):
        msg = f"{cls.__name__}.routes must be a dict of identifier -> method name."
        raise ControllerLoadError(msg)

    descriptors: list[MethodDescriptor] = []
    for identifier, method_name in table.items():
        if not callable(getattr(cls, method_name, None)):
            msg = f"{cls.__name__}.routes[{identifier!r}] names unknown method {method_name!r}."
            raise ControllerLoadError(msg)
        descriptor = parse_method_name(identifier, method_name)
        if descriptor is None:
            msg = f"{cls.__name__}.routes key {identifier!r} does not start with an HTTP verb."
            raise ControllerLoadError(msg)
        descriptors.append(descriptor)

    explicit = set(table.values())
    for name in iter_candidate_methods(cls, stop_at=(Controller,)):
        if name in explicit or not is_eligible_name(name):
            continue
        descriptor = parse_method_name(name)
        if descriptor is not None:
            descriptors.append(descriptor)

    return tuple(descriptors)


def _import_module(source: ControllerSource) -> ModuleType:
    """Import a controller file without touching ``sys.path``."""
    module_name = f"{MODULE_PREFIX}.{'.'.join((*source.base_uri[1:], source.name))}"
    spec = importlib.util.spec_from_file_location(module_name, source.path)
    if spec is None or spec.loader is None:
        msg = f"Controller cannot be loaded using location: {source.path}"
        raise ControllerLoadError(msg, source=str(source.path))

    try:
        module = importlib.util.module_from_spec(spec)
        # Registered so dataclasses and pickling inside controllers work
        sys.modules[module_name] = module
        spec.loader.exec_module(module)
    except Exception as exc:
        sys.modules.pop(module_name, None)
        msg = f"Controller cannot be loaded using location: {source.path}: {exc}"
        raise ControllerLoadError(msg, source=str(source.path)) from exc

    return module


def _find_controller_class(module: ModuleType, source: ControllerSource) -> type:
    """Resolve the single controller class a module exports."""
    explicit = getattr(module, "__controller__", None)
    if explicit is not None:
        if not inspect.isclass(explicit):
            msg = f"{source.path}: __controller__ must be a class, got {type(explicit).__name__}."
            raise ControllerLoadError(msg, source=str(source.path))
        return explicit

    candidates = [
        value
        for name, value in vars(module).items()
        if inspect.isclass(value)
        and value.__module__ == module.__name__
        and not name.startswith("_")
    ]
    if len(candidates) == 1:
        return candidates[0]

    if not candidates:
        msg = f"{source.path}: controllers must be defined as classes; no class found."
    else:
        names = ", ".join(c.__name__ for c in candidates)
        msg = f"{source.path}: found several classes ({names}); set __controller__ to pick one."
    raise ControllerLoadError(msg, source=str(source.path))
