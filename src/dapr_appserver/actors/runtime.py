"""Actor registry, activation and turn-based dispatch."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from dapr_appserver.errors import ActorMethodNotFoundError, ActorNotRegisteredError
from dapr_appserver.utils.callbacks import call_handler

from .actor import Actor
from .state import ActorStateManager

if TYPE_CHECKING:
    from dapr_appserver.interfaces.client import DaprClient

logger = logging.getLogger(__name__)

# Methods of the base class that the sidecar must not be able to call directly.
_RESERVED_METHODS = frozenset(
    name for name in vars(Actor) if not name.startswith("_")
)


@dataclass(frozen=True)
class ActorRuntimeConfig:
    """Actor settings reported to the sidecar on `GET /dapr/config`.

    Durations use the sidecar's Go-style notation (e.g. `"1h"`, `"30s"`).
    """

    actor_idle_timeout: str = "1h"
    actor_scan_interval: str = "30s"
    drain_ongoing_call_timeout: str = "60s"
    drain_rebalanced_actors: bool = True

    def to_dict(self, entities: list[str]) -> dict[str, Any]:
        """Return the configuration document for the given actor types."""
        return {
            "entities": entities,
            "actorIdleTimeout": self.actor_idle_timeout,
            "actorScanInterval": self.actor_scan_interval,
            "drainOngoingCallTimeout": self.drain_ongoing_call_timeout,
            "drainRebalancedActors": self.drain_rebalanced_actors,
        }


class ActorRuntime:
    """Hosts actor instances for the registered actor types.

    Instances are created and activated on their first call and kept until
    the sidecar deactivates them. Calls to the same instance are serialized;
    calls to different instances may interleave. A call that raises has its
    pending state changes discarded.

    Args:
        client: Outbound client the actors' state managers persist through.
            Not owned; the runtime never closes it.
        config: Settings reported to the sidecar.
    """

    def __init__(
        self, client: DaprClient, config: ActorRuntimeConfig | None = None
    ) -> None:
        self._client = client
        self.config = config or ActorRuntimeConfig()
        self._types: dict[str, type[Actor]] = {}
        self._active: dict[tuple[str, str], Actor] = {}
        self._locks: dict[tuple[str, str], asyncio.Lock] = {}

    # --- Registry ---

    def register(self, actor_cls: type[Actor]) -> None:
        """Register an actor class under its type name.

        Raises:
            TypeError: If `actor_cls` is not an `Actor` subclass.
        """
        if not (isinstance(actor_cls, type) and issubclass(actor_cls, Actor)):
            raise TypeError(f"{actor_cls!r} is not an Actor subclass")
        actor_type = actor_cls.actor_type()
        if actor_type in self._types:
            logger.warning("Actor type %s registered twice; replacing", actor_type)
        self._types[actor_type] = actor_cls
        logger.info("Registered actor type %s", actor_type)

    def entities(self) -> list[str]:
        """Return the registered actor type names, in registration order."""
        return list(self._types)

    def config_document(self) -> dict[str, Any]:
        """Return the configuration document served to the sidecar."""
        return self.config.to_dict(self.entities())

    def is_active(self, actor_type: str, actor_id: str) -> bool:
        """Return True if the given instance is currently activated."""
        return (actor_type, actor_id) in self._active

    # --- Dispatch ---

    async def invoke(
        self, actor_type: str, actor_id: str, method_name: str, data: Any
    ) -> Any:
        """Call `method_name` on an actor instance and save its state.

        `data` is passed as the only argument when not `None`.

        Raises:
            ActorNotRegisteredError: If the actor type is unknown.
            ActorMethodNotFoundError: If the method does not exist or is not public.
        """
        cls = self._lookup(actor_type)
        if method_name.startswith("_") or method_name in _RESERVED_METHODS:
            raise ActorMethodNotFoundError(actor_type, method_name)
        if not callable(getattr(cls, method_name, None)):
            raise ActorMethodNotFoundError(actor_type, method_name)

        async with self._lock_for(actor_type, actor_id):
            actor = await self._activate(actor_type, actor_id)
            method = getattr(actor, method_name)
            logger.debug("Invoking %s/%s.%s", actor_type, actor_id, method_name)
            args = () if data is None else (data,)
            return await self._run_turn(actor, call_handler(method, *args))

    async def fire_timer(
        self, actor_type: str, actor_id: str, timer_name: str, body: dict[str, Any]
    ) -> None:
        """Run the callback method a timer was registered with.

        The timer body carries the callback method name under `"callback"`
        and an optional payload under `"data"`.
        """
        callback = body.get("callback")
        if not callback:
            raise ActorMethodNotFoundError(actor_type, f"<timer {timer_name}>")
        logger.debug("Timer %s fired for %s/%s", timer_name, actor_type, actor_id)
        await self.invoke(actor_type, actor_id, callback, body.get("data"))

    async def fire_reminder(
        self,
        actor_type: str,
        actor_id: str,
        reminder_name: str,
        body: dict[str, Any],
    ) -> None:
        """Deliver a reminder to the actor's `receive_reminder`."""
        self._lookup(actor_type)
        async with self._lock_for(actor_type, actor_id):
            actor = await self._activate(actor_type, actor_id)
            logger.debug(
                "Reminder %s fired for %s/%s", reminder_name, actor_type, actor_id
            )
            await self._run_turn(
                actor,
                actor.receive_reminder(
                    reminder_name,
                    body.get("data"),
                    body.get("dueTime"),
                    body.get("period"),
                ),
            )

    async def deactivate(self, actor_type: str, actor_id: str) -> bool:
        """Deactivate an instance. Returns False if it was not active.

        Raises:
            ActorNotRegisteredError: If the actor type is unknown.
        """
        self._lookup(actor_type)
        key = (actor_type, actor_id)
        async with self._lock_for(actor_type, actor_id):
            actor = self._active.pop(key, None)
            if actor is None:
                return False
            await actor.on_deactivate()
            actor.state_manager.clear_cache()
        logger.debug("Deactivated actor %s/%s", actor_type, actor_id)
        return True

    # --- Internals ---

    def _lookup(self, actor_type: str) -> type[Actor]:
        try:
            return self._types[actor_type]
        except KeyError as exc:
            raise ActorNotRegisteredError(actor_type) from exc

    async def _run_turn(self, actor: Actor, call: Awaitable[Any]) -> Any:
        # A failed turn leaves nothing pending for the next one.
        try:
            result = await call
            await actor.state_manager.save_state()
        except BaseException:
            actor.state_manager.clear_cache()
            raise
        return result

    def _lock_for(self, actor_type: str, actor_id: str) -> asyncio.Lock:
        # Locks outlive deactivation: queued callers still hold a reference.
        return self._locks.setdefault((actor_type, actor_id), asyncio.Lock())

    async def _activate(self, actor_type: str, actor_id: str) -> Actor:
        key = (actor_type, actor_id)
        if (actor := self._active.get(key)) is not None:
            return actor
        cls = self._types[actor_type]
        actor = cls(actor_id, ActorStateManager(self._client, actor_type, actor_id))
        await actor.on_activate()
        self._active[key] = actor
        logger.debug("Activated actor %s/%s", actor_type, actor_id)
        return actor
