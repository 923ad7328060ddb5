"""Service invocation over gRPC."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from dapr_appserver.interfaces.invoker import HttpMethod, InvokerRequest, ServerInvoker

from .server import GrpcServer

logger = logging.getLogger(__name__)

# pylint: disable=too-few-public-methods


class GrpcServerInvoker(ServerInvoker):
    """Serves methods the sidecar forwards through `AppCallback.OnInvoke`.

    The verb is taken from the request's `http_extension`; invocations
    without one are treated as POST.
    """

    def __init__(self, server: GrpcServer) -> None:
        self.server = server

    def listen(
        self,
        method_name: str,
        callback: Callable[[InvokerRequest], Any],
        http_method: HttpMethod = HttpMethod.POST,
    ) -> None:
        verb = HttpMethod(http_method)
        self.server.add_method_handler(method_name, verb, callback)
        logger.info("Listening for %s %s", verb.value, method_name)
