"""Nightframe application class.

Mutable during setup (config, routes directory, mock store).
Frozen at runtime when app.run() or __call__() is first invoked: the
routes directory is walked once and the route table is compiled.
"""

import logging
import threading
from pathlib import Path

from nightframe._internal.asgi import Receive, Scope, Send
from nightframe.config import AppConfig
from nightframe.mocks.store import MockStore
from nightframe.routing.route import RouteEntry
from nightframe.routing.table import ControllerRouter, build_route_table
from nightframe.server.handler import handle_request

logger = logging.getLogger("nightframe.server")


class App:
    """The nightframe application.

    Usage::

        app = App(AppConfig(routes_dir="routes", e2e_testing_mode=True))
        app.run()

    Thread safety:
        The freeze transition uses a Lock + double-check to ensure exactly
        one thread builds the route table, even when several ASGI workers
        call ``__call__()`` concurrently on first request.
    """

    __slots__ = (
        "_freeze_lock",
        "_frozen",
        # Compiled state (populated by _freeze)
        "_routers",
        "config",
        "mock_store",
        "routes_dir",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        routes_dir: str | Path | None = None,
        mock_store: MockStore | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self.routes_dir: Path = Path(routes_dir if routes_dir is not None else self.config.routes_dir)
        self.mock_store: MockStore = mock_store if mock_store is not None else MockStore()
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()
        self._routers: tuple[ControllerRouter, ...] = ()

    @property
    def routers(self) -> tuple[ControllerRouter, ...]:
        """Controller routers in dispatch order. Freezes the app."""
        self._ensure_frozen()
        return self._routers

    @property
    def routes(self) -> list[RouteEntry]:
        """Every registered route, in dispatch order. Freezes the app."""
        return [entry for router in self.routers for entry in router.entries]

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Build the route table and start the pounce server.

        Args:
            host: Override bind host.
            port: Override bind port.
        """
        self._ensure_frozen()

        from nightframe.server.dev import run_dev_server

        run_dev_server(
            self,
            host or self.config.host,
            port or self.config.port,
            reload=self.config.debug,
            reload_include=self.config.reload_include,
            reload_dirs=self.config.reload_dirs,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles the lifespan scope directly, then delegates HTTP scopes
        to the request handler pipeline.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        self._ensure_frozen()

        await handle_request(
            scope,
            receive,
            send,
            routers=self._routers,
            mock_store=self.mock_store,
            config=self.config,
        )

    async def _handle_lifespan(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup (before first HTTP request) so a
        broken controller stops the server from starting.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Walk the routes directory and compile the route table.

        MUST only be called while holding _freeze_lock. A
        ControllerLoadError propagates and leaves the app unfrozen.
        """
        self._routers = tuple(build_route_table(self.routes_dir, self.config))
        self._frozen = True

        logger.info(
            "Loaded %d routes from %d controllers in %s",
            sum(len(router.entries) for router in self._routers),
            len(self._routers),
            self.routes_dir,
        )
        if self.config.e2e_testing_mode:
            logger.info("E2E testing mode: mock endpoints at %s", self.config.mocks_path)
