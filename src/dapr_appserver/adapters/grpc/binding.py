"""Input bindings over gRPC."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from dapr_appserver.interfaces.binding import ServerBinding

from .server import GrpcServer

logger = logging.getLogger(__name__)

# pylint: disable=too-few-public-methods


class GrpcServerBinding(ServerBinding):
    """Receives input binding events through `AppCallback.OnBindingEvent`."""

    def __init__(self, server: GrpcServer) -> None:
        self.server = server

    def receive(self, binding_name: str, callback: Callable[[Any], Any]) -> None:
        self.server.add_binding_handler(binding_name, callback)
        logger.info("Receiving input binding %s", binding_name)
