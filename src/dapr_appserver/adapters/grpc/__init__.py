"""gRPC (grpc.aio) transport server, capabilities and sidecar client."""

from .actor import GrpcServerActor
from .binding import GrpcServerBinding
from .client import GrpcDaprClient
from .invoker import GrpcServerInvoker
from .pubsub import GrpcServerPubSub
from .server import GrpcServer

__all__ = [
    "GrpcDaprClient",
    "GrpcServer",
    "GrpcServerActor",
    "GrpcServerBinding",
    "GrpcServerInvoker",
    "GrpcServerPubSub",
]
