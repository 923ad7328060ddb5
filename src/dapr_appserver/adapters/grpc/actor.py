"""Actor hosting over gRPC."""

from __future__ import annotations

from typing import Any

from dapr_appserver.errors import ActorsNotSupportedError
from dapr_appserver.interfaces.actor import ServerActor

from .server import GrpcServer

PROTOCOL_NAME = "gRPC"


class GrpcServerActor(ServerActor):
    """Actor capability of the gRPC transport.

    The sidecar only calls actors back over HTTP, so nothing can be hosted
    here: registration, initialization and deactivation raise
    `ActorsNotSupportedError`. No outbound client is needed.
    """

    def __init__(self, server: GrpcServer) -> None:
        self.server = server

    def register_actor(self, actor_cls: type[Any]) -> None:
        raise ActorsNotSupportedError(PROTOCOL_NAME)

    async def init(self) -> None:
        raise ActorsNotSupportedError(PROTOCOL_NAME)

    def get_registered_actors(self) -> list[str]:
        return []

    async def deactivate_actor(self, actor_type: str, actor_id: str) -> None:
        raise ActorsNotSupportedError(PROTOCOL_NAME)
