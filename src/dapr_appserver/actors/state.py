"""Per-actor state manager backed by the outbound sidecar client."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from dapr_appserver.interfaces.client import StateOperation

if TYPE_CHECKING:
    from dapr_appserver.interfaces.client import DaprClient

logger = logging.getLogger(__name__)

_UPSERT = "upsert"
_DELETE = "delete"
_UNCHANGED = "unchanged"


class ActorStateManager:
    """Cached view over one actor's state.

    Reads go to the sidecar on first access and are cached afterwards. Writes
    and removals are only recorded; `save_state` sends every pending change
    to the sidecar as a single transaction.
    """

    def __init__(self, client: DaprClient, actor_type: str, actor_id: str) -> None:
        self._client = client
        self._actor_type = actor_type
        self._actor_id = actor_id
        # key -> (value, pending change)
        self._cache: dict[str, tuple[Any, str]] = {}

    async def get_state(self, key: str, default: Any = None) -> Any:
        """Return the value stored under `key`, or `default` if there is none."""
        if key in self._cache:
            value, change = self._cache[key]
            return default if change == _DELETE else value
        value = await self._client.get_actor_state(
            self._actor_type, self._actor_id, key
        )
        if value is None:
            return default
        self._cache[key] = (value, _UNCHANGED)
        return value

    async def contains_state(self, key: str) -> bool:
        """Return True if a value is stored under `key`."""
        sentinel = object()
        return await self.get_state(key, sentinel) is not sentinel

    async def set_state(self, key: str, value: Any) -> None:
        """Record `value` under `key`; persisted on the next `save_state`."""
        self._cache[key] = (value, _UPSERT)

    async def remove_state(self, key: str) -> None:
        """Record the removal of `key`; persisted on the next `save_state`."""
        self._cache[key] = (None, _DELETE)

    async def save_state(self) -> None:
        """Send all pending changes to the sidecar in one transaction."""
        operations = [
            StateOperation(change, key, value)
            for key, (value, change) in self._cache.items()
            if change != _UNCHANGED
        ]
        if not operations:
            return
        logger.debug(
            "Saving %d state change(s) for actor %s/%s",
            len(operations),
            self._actor_type,
            self._actor_id,
        )
        await self._client.execute_actor_state_transaction(
            self._actor_type, self._actor_id, operations
        )
        self._cache = {
            key: (value, _UNCHANGED)
            for key, (value, change) in self._cache.items()
            if change != _DELETE
        }

    def clear_cache(self) -> None:
        """Drop every cached value and pending change."""
        self._cache.clear()
