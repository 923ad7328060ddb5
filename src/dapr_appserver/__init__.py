"""DAPR-APPSERVER

Application-side server for the Dapr sidecar. Builds one transport-bound
server (HTTP or gRPC) together with the publish/subscribe, input binding,
service invocation and actor capabilities a hosting application registers
its handlers on.
"""

__version__ = "0.1.0"

from .server import DaprServer, LifecycleState  # noqa: E402

__all__ = ["__version__", "DaprServer", "LifecycleState"]
