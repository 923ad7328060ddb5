"""Actor runtime for DAPR-APPSERVER.

Hosts virtual actors on behalf of the sidecar: keeps the registry of actor
types, activates instances on first use, dispatches method, timer and
reminder calls to them one turn at a time, and persists their state through
the outbound client.
"""

from .actor import Actor
from .runtime import ActorRuntime, ActorRuntimeConfig
from .state import ActorStateManager

__all__ = ["Actor", "ActorRuntime", "ActorRuntimeConfig", "ActorStateManager"]
