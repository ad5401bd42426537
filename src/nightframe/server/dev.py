"""Development server.

Starts a pounce ASGI server with the live nightframe App object.
Single worker; reload is enabled when the app runs with ``debug``.
"""


def run_dev_server(
    app: object,
    host: str,
    port: int,
    *,
    reload: bool = False,
    reload_include: tuple[str, ...] = (),
    reload_dirs: tuple[str, ...] = (),
    app_path: str | None = None,
) -> None:
    """Serve *app* with pounce until interrupted.

    Pounce's ``run()`` takes an import string, but the CLI builds a live
    ``App`` from the settings file, so ``pounce.Server`` is used directly
    with the ASGI callable.

    Args:
        app: ASGI callable (nightframe App instance).
        host: Bind host address.
        port: Bind port number.
        reload: Restart on file changes.
        reload_include: Extra file extensions to watch when reload is
            active (e.g. ``(".html", ".json")``).
        reload_dirs: Extra directories to watch alongside cwd.
        app_path: Optional ``"module:attribute"`` import string so pounce
            can reimport the app on each reload.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=host,
        port=port,
        workers=1,
        reload=reload,
        reload_include=reload_include,
        reload_dirs=reload_dirs,
    )
    server = Server(config, app, app_path=app_path)
    server.run()
