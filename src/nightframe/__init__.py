"""Nightframe: convention-based controllers for ASGI.

Routes come from the file layout of a controllers directory and the
names of controller methods; no per-route registration code.

Basic usage::

    # routes/users.py
    from nightframe import Controller

    class Users(Controller):
        routes = {"post /activate": "activate"}

        def get(self, request, response, next):
            return {"users": []}                 # GET  /users

        async def activate(self, request, response, next):
            return await request.json()          # POST /users/activate

    # app.py
    from nightframe import App, load_settings

    app = App(load_settings())
    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "BadRequest",
    "ConfigurationError",
    "Controller",
    "ControllerLoadError",
    "HTTPError",
    "MockDefinition",
    "MockNormalizationError",
    "MockStore",
    "Next",
    "NightframeError",
    "NotFound",
    "Request",
    "ResponseWriter",
    "SecurityHeadersConfig",
    "load_settings",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import nightframe`` fast while providing a clean top-level API.
    """
    if name == "App":
        from nightframe.app import App

        return App

    if name in ("AppConfig", "SecurityHeadersConfig"):
        from nightframe import config as _config

        return getattr(_config, name)

    if name == "load_settings":
        from nightframe.settings import load_settings

        return load_settings

    if name == "Controller":
        from nightframe.controllers.base import Controller

        return Controller

    if name == "Request":
        from nightframe.http.request import Request

        return Request

    if name == "ResponseWriter":
        from nightframe.http.response import ResponseWriter

        return ResponseWriter

    if name == "Next":
        from nightframe.server.lifecycle import Next

        return Next

    if name in ("MockDefinition", "MockStore"):
        from nightframe.mocks import store as _store

        return getattr(_store, name)

    if name in (
        "BadRequest",
        "ConfigurationError",
        "ControllerLoadError",
        "HTTPError",
        "MockNormalizationError",
        "NightframeError",
        "NotFound",
    ):
        from nightframe import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
