"""Base class for application actors."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .state import ActorStateManager


class Actor:
    """Base class for actors hosted by `ActorRuntime`.

    Subclasses expose their callable methods as public (non-underscore)
    methods, sync or async. The actor type name is the subclass name.

    Attributes:
        actor_id: Identifier of this instance within its type.
        state_manager: Cached access to the actor's persisted state. Changes
            are saved after every successful method, timer or reminder call.
    """

    def __init__(self, actor_id: str, state_manager: ActorStateManager) -> None:
        self.actor_id = actor_id
        self.state_manager = state_manager

    @classmethod
    def actor_type(cls) -> str:
        """Return the type name the sidecar knows this actor by."""
        return cls.__name__

    async def on_activate(self) -> None:
        """Called once when the instance is activated, before its first call."""

    async def on_deactivate(self) -> None:
        """Called when the sidecar deactivates the instance."""

    async def receive_reminder(
        self, name: str, state: Any, due_time: str | None, period: str | None
    ) -> None:
        """Called when a reminder registered for this actor fires."""
