"""Actor hosting capability interface."""

import abc
from typing import Any


class ServerActor(abc.ABC):
    """Contract for hosting virtual actors on behalf of the sidecar."""

    @abc.abstractmethod
    def register_actor(self, actor_cls: type[Any]) -> None:
        """Register an actor class; its type name is the class name."""

    @abc.abstractmethod
    async def init(self) -> None:
        """Expose the registered actor types to the sidecar.

        Must be awaited after all actors are registered and before the
        server is started.
        """

    @abc.abstractmethod
    def get_registered_actors(self) -> list[str]:
        """Return the registered actor type names."""

    @abc.abstractmethod
    async def deactivate_actor(self, actor_type: str, actor_id: str) -> None:
        """Deactivate one actor instance, if it is active."""
