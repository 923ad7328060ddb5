"""HTTP (aiohttp) transport server, capabilities and sidecar client."""

from .actor import HttpServerActor
from .binding import HttpServerBinding
from .client import HttpDaprClient
from .invoker import HttpServerInvoker
from .pubsub import HttpServerPubSub
from .server import HttpServer

__all__ = [
    "HttpDaprClient",
    "HttpServer",
    "HttpServerActor",
    "HttpServerBinding",
    "HttpServerInvoker",
    "HttpServerPubSub",
]
