"""Interfaces (application boundary) for DAPR-APPSERVER.

Defines the framework-free contracts shared by the composition root and the
protocol adapters: the transport server, the outbound sidecar client and the
four server-side capabilities (pubsub, binding, invoker, actor), plus the
small DTOs they exchange.

Dependency rule: this package only imports from itself. It may be imported by
`dapr_appserver.adapters`, `dapr_appserver.actors` and
`dapr_appserver.bootstrap`.
"""

from .actor import ServerActor
from .binding import ServerBinding
from .client import DaprClient, StateOperation
from .invoker import HttpMethod, InvokerRequest, ServerInvoker
from .pubsub import ServerPubSub, Subscription
from .transport import TransportServer

__all__ = [
    "DaprClient",
    "HttpMethod",
    "InvokerRequest",
    "ServerActor",
    "ServerBinding",
    "ServerInvoker",
    "ServerPubSub",
    "StateOperation",
    "Subscription",
    "TransportServer",
]
