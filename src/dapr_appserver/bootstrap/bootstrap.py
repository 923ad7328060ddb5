"""Build the outbound client, the transport server and its capabilities."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, fields

from dapr_appserver.adapters.grpc import (
    GrpcDaprClient,
    GrpcServer,
    GrpcServerActor,
    GrpcServerBinding,
    GrpcServerInvoker,
    GrpcServerPubSub,
)
from dapr_appserver.adapters.http import (
    HttpDaprClient,
    HttpServer,
    HttpServerActor,
    HttpServerBinding,
    HttpServerInvoker,
    HttpServerPubSub,
)
from dapr_appserver.config import CommunicationProtocol, ServerSettings
from dapr_appserver.interfaces import (
    DaprClient,
    ServerActor,
    ServerBinding,
    ServerInvoker,
    ServerPubSub,
    TransportServer,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CapabilitySet:
    """The four capability handles bound to one transport server.

    Raises:
        TypeError: If any capability is `None`.
    """

    pubsub: ServerPubSub
    binding: ServerBinding
    invoker: ServerInvoker
    actor: ServerActor

    def __post_init__(self) -> None:
        for f in fields(self):
            if getattr(self, f.name) is None:
                raise TypeError(f"capability '{f.name}' must not be None")


@dataclass(frozen=True)
class ProtocolBundle:
    """A transport server together with the capabilities bound to it."""

    server: TransportServer
    capabilities: CapabilitySet


@dataclass(frozen=True)
class BuildContext:
    """Collaborators available to every protocol builder.

    Each builder uses only what it needs.
    """

    settings: ServerSettings
    client: DaprClient


ProtocolBuilder = Callable[[BuildContext], ProtocolBundle]


def build_client(settings: ServerSettings) -> DaprClient:
    """Build the outbound sidecar client for the configured protocol."""
    if settings.communication_protocol is CommunicationProtocol.GRPC:
        return GrpcDaprClient(
            settings.dapr_host, settings.dapr_port, settings.client_options
        )
    return HttpDaprClient(
        settings.dapr_host, settings.dapr_port, settings.client_options
    )


def build_grpc(context: BuildContext) -> ProtocolBundle:
    """Build the gRPC transport; no capability receives the client."""
    # pylint: disable=unused-argument
    server = GrpcServer()
    return ProtocolBundle(
        server=server,
        capabilities=CapabilitySet(
            pubsub=GrpcServerPubSub(server),
            binding=GrpcServerBinding(server),
            invoker=GrpcServerInvoker(server),
            actor=GrpcServerActor(server),
        ),
    )


def build_http(context: BuildContext) -> ProtocolBundle:
    """Build the HTTP transport; the actor capability also gets the client."""
    server = HttpServer()
    return ProtocolBundle(
        server=server,
        capabilities=CapabilitySet(
            pubsub=HttpServerPubSub(server),
            binding=HttpServerBinding(server),
            invoker=HttpServerInvoker(server),
            actor=HttpServerActor(server, context.client),
        ),
    )


PROTOCOL_BUILDERS: dict[CommunicationProtocol, ProtocolBuilder] = {
    CommunicationProtocol.HTTP: build_http,
    CommunicationProtocol.GRPC: build_grpc,
}


def build_protocol(protocol: object, context: BuildContext) -> ProtocolBundle:
    """Build the transport server and capabilities for `protocol`.

    Any value that is not a known protocol takes the HTTP builder.
    """
    resolved = CommunicationProtocol.resolve(protocol)
    builder = PROTOCOL_BUILDERS.get(
        resolved, PROTOCOL_BUILDERS[CommunicationProtocol.HTTP]
    )
    bundle = builder(context)
    logger.debug(
        "Built %s transport %s", resolved.name, type(bundle.server).__name__
    )
    return bundle
