"""Input bindings over HTTP."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from aiohttp import web

from dapr_appserver.interfaces.binding import ServerBinding
from dapr_appserver.utils.callbacks import call_handler, handler_name

from .server import HttpServer, encode_response, read_body

logger = logging.getLogger(__name__)

# pylint: disable=too-few-public-methods


class HttpServerBinding(ServerBinding):
    """Receives input binding events the sidecar POSTs to `/<binding name>`.

    The sidecar probes the route with OPTIONS at startup to learn which
    bindings the application handles; that probe is answered with 200.
    """

    def __init__(self, server: HttpServer) -> None:
        self.server = server

    def receive(self, binding_name: str, callback: Callable[[Any], Any]) -> None:
        path = f"/{binding_name}"

        async def handle_probe(request: web.Request) -> web.Response:
            # pylint: disable=unused-argument
            return web.Response(status=200)

        async def handle_event(request: web.Request) -> web.Response:
            data = await read_body(request)
            try:
                result = await call_handler(callback, data)
            except Exception:  # pylint: disable=broad-except
                logger.exception(
                    "Binding handler %s failed for %s",
                    handler_name(callback),
                    binding_name,
                )
                return web.Response(status=500)
            return encode_response(result)

        self.server.add_route("OPTIONS", path, handle_probe)
        self.server.add_route("POST", path, handle_event)
        logger.info("Receiving input binding %s on %s", binding_name, path)
