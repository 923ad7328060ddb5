"""Outbound sidecar client interface."""

import abc
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .invoker import HttpMethod


@dataclass(frozen=True)
class StateOperation:
    """One operation of an actor state transaction.

    Attributes:
        operation: `"upsert"` or `"delete"`.
        key: State key.
        value: New value for upserts; ignored for deletes.
    """

    operation: str
    key: str
    value: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Return the operation in the sidecar's wire shape."""
        request: dict[str, Any] = {"key": self.key}
        if self.operation == "upsert":
            request["value"] = self.value
        return {"operation": self.operation, "request": request}


class DaprClient(abc.ABC):
    """Contract for calls the application makes into its sidecar.

    Retries and payload formats are the sidecar's concern; failures surface
    as `SidecarRequestError`.
    """

    @abc.abstractmethod
    async def publish(self, pubsub_name: str, topic: str, data: Any) -> None:
        """Publish `data` to `topic` on the `pubsub_name` component."""

    @abc.abstractmethod
    async def invoke(
        self,
        app_id: str,
        method_name: str,
        data: Any = None,
        http_method: HttpMethod = HttpMethod.POST,
    ) -> Any:
        """Invoke `method_name` on application `app_id`; return the decoded response."""

    @abc.abstractmethod
    async def send_binding(
        self,
        binding_name: str,
        operation: str,
        data: Any = None,
        metadata: Mapping[str, str] | None = None,
    ) -> Any:
        """Invoke `operation` on the `binding_name` output binding."""

    @abc.abstractmethod
    async def get_actor_state(self, actor_type: str, actor_id: str, key: str) -> Any:
        """Return the stored value of `key` for one actor, or `None` if absent."""

    @abc.abstractmethod
    async def execute_actor_state_transaction(
        self, actor_type: str, actor_id: str, operations: Sequence[StateOperation]
    ) -> None:
        """Apply `operations` to one actor's state atomically."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Release connections to the sidecar. Idempotent."""
