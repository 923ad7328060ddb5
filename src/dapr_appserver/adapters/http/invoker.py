"""Service invocation over HTTP."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from aiohttp import web

from dapr_appserver.interfaces.invoker import HttpMethod, InvokerRequest, ServerInvoker
from dapr_appserver.utils.callbacks import call_handler, handler_name

from .server import HttpServer, encode_response, read_body

logger = logging.getLogger(__name__)

# pylint: disable=too-few-public-methods


class HttpServerInvoker(ServerInvoker):
    """Serves methods the sidecar forwards to `/<method name>`."""

    def __init__(self, server: HttpServer) -> None:
        self.server = server

    def listen(
        self,
        method_name: str,
        callback: Callable[[InvokerRequest], Any],
        http_method: HttpMethod = HttpMethod.POST,
    ) -> None:
        verb = HttpMethod(http_method)
        path = f"/{method_name.lstrip('/')}"

        async def handle_invoke(request: web.Request) -> web.Response:
            invocation = InvokerRequest(
                method=method_name,
                body=await read_body(request),
                query=dict(request.query),
                headers=dict(request.headers),
                http_method=verb,
            )
            try:
                result = await call_handler(callback, invocation)
            except Exception as exc:  # pylint: disable=broad-except
                logger.exception(
                    "Method %s (%s) failed in %s",
                    method_name,
                    verb.value,
                    handler_name(callback),
                )
                return encode_response({"error": str(exc)}, status=500)
            return encode_response(result)

        self.server.add_route(verb.value, path, handle_invoke)
        logger.info("Listening for %s %s", verb.value, path)
