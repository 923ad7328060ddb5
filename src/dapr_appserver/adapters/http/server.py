"""REST-style transport server built on aiohttp.

The server owns one `aiohttp.web.Application`. Capabilities add their routes
to it before the first `start`; aiohttp freezes the router once the
application runner is set up, so later registrations are rejected.

Lifecycle
---------
- `start(host, port)`: binds the listening socket, sets the runner up on
  first use, then serves the socket on a new `SockSite`. The socket is bound
  before the runner exists, so a failed bind leaves the router open and
  routes can still be added.
- `stop()`: stops the site only. The runner and its routes stay ready, so a
  later `start` re-binds without rebuilding anything.
- `stop_server()`: cleans the runner up (application shutdown and cleanup
  signals run). Final.
"""

from __future__ import annotations

import logging
import socket
from collections.abc import Awaitable, Callable
from typing import Any

from aiohttp import web

from dapr_appserver.adapters import codec
from dapr_appserver.errors import ServerStateError
from dapr_appserver.interfaces.pubsub import Subscription
from dapr_appserver.interfaces.transport import TransportServer

logger = logging.getLogger(__name__)

RouteHandler = Callable[[web.Request], Awaitable[web.StreamResponse]]

SUBSCRIBE_PATH = "/dapr/subscribe"


async def read_body(request: web.Request) -> Any:
    """Return the decoded request body, or `None` if it is empty."""
    return codec.decode(await request.read())


def encode_response(value: Any, status: int = 200) -> web.Response:
    """Encode a handler result as a response; `None` gives an empty body."""
    if value is None:
        return web.Response(status=status)
    return web.Response(
        status=status, body=codec.encode(value), content_type="application/json"
    )


class HttpServer(TransportServer):
    """Application server the sidecar calls over HTTP."""

    def __init__(self, app: web.Application | None = None) -> None:
        self.app = app if app is not None else web.Application()
        self._runner: web.AppRunner | None = None
        self._site: web.SockSite | None = None
        self._subscriptions: list[Subscription] = []
        self.app.router.add_get(SUBSCRIBE_PATH, self._handle_subscribe)

    # --- Registration ---

    def add_route(self, method: str, path: str, handler: RouteHandler) -> None:
        """Register `handler` for `method path`.

        Raises:
            ServerStateError: If the server has already been started.
        """
        if self._runner is not None:
            raise ServerStateError(
                f"Cannot register {method} {path}: routes must be added before start()"
            )
        self.app.router.add_route(method, path, handler)
        logger.debug("Registered route %s %s", method, path)

    def add_subscription(self, subscription: Subscription) -> None:
        """Advertise `subscription` on the subscription listing endpoint."""
        self._subscriptions.append(subscription)

    @property
    def subscriptions(self) -> list[Subscription]:
        """Subscriptions advertised to the sidecar."""
        return list(self._subscriptions)

    # --- State ---

    @property
    def is_listening(self) -> bool:
        """True while a listener is bound."""
        return self._site is not None

    @property
    def bound_port(self) -> int | None:
        """Port actually bound (useful when started on port "0"), or `None`."""
        if self._runner is None or not self._runner.addresses:
            return None
        return self._runner.addresses[0][1]

    # --- TransportServer ---

    async def start(self, host: str, port: str) -> None:
        if self._site is not None:
            raise ServerStateError("HTTP server is already listening")
        sock = socket.create_server((host, int(port)))
        try:
            if self._runner is None:
                runner = web.AppRunner(self.app)
                await runner.setup()
                self._runner = runner
            site = web.SockSite(self._runner, sock)
            await site.start()
        except BaseException:
            sock.close()
            raise
        self._site = site
        logger.info("HTTP server listening on %s:%s", host, self.bound_port or port)

    async def stop(self) -> None:
        if self._site is None:
            return
        site, self._site = self._site, None
        await site.stop()
        logger.info("HTTP server stopped listening")

    async def stop_server(self) -> None:
        self._site = None
        if self._runner is None:
            return
        runner, self._runner = self._runner, None
        await runner.cleanup()
        logger.info("HTTP server shut down")

    # --- Handlers ---

    async def _handle_subscribe(self, request: web.Request) -> web.Response:
        # pylint: disable=unused-argument
        return web.json_response([s.to_dict() for s in self._subscriptions])
