"""Test doubles for the transport server and the outbound client."""

from collections.abc import Mapping, Sequence
from typing import Any

from dapr_appserver.config import ServerSettings
from dapr_appserver.interfaces import DaprClient, StateOperation, TransportServer
from dapr_appserver.interfaces.invoker import HttpMethod


class FakeDaprClient(DaprClient):
    """In-memory client; records every call made to it."""

    def __init__(self, settings: ServerSettings | None = None) -> None:
        self.settings = settings
        self.state: dict[tuple[str, str, str], Any] = {}
        self.transactions: list[tuple[str, str, list[StateOperation]]] = []
        self.published: list[tuple[str, str, Any]] = []
        self.closed = False

    async def publish(self, pubsub_name: str, topic: str, data: Any) -> None:
        self.published.append((pubsub_name, topic, data))

    async def invoke(
        self,
        app_id: str,
        method_name: str,
        data: Any = None,
        http_method: HttpMethod = HttpMethod.POST,
    ) -> Any:
        return {"app_id": app_id, "method": method_name, "data": data}

    async def send_binding(
        self,
        binding_name: str,
        operation: str,
        data: Any = None,
        metadata: Mapping[str, str] | None = None,
    ) -> Any:
        return None

    async def get_actor_state(self, actor_type: str, actor_id: str, key: str) -> Any:
        return self.state.get((actor_type, actor_id, key))

    async def execute_actor_state_transaction(
        self, actor_type: str, actor_id: str, operations: Sequence[StateOperation]
    ) -> None:
        self.transactions.append((actor_type, actor_id, list(operations)))
        for op in operations:
            if op.operation == "upsert":
                self.state[(actor_type, actor_id, op.key)] = op.value
            else:
                self.state.pop((actor_type, actor_id, op.key), None)

    async def close(self) -> None:
        self.closed = True


class FakeTransport(TransportServer):
    """Transport server that records calls and can be told to fail."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.fail_on: set[str] = set()

    def _record(self, *call: Any) -> None:
        self.calls.append(call)
        if call[0] in self.fail_on:
            raise OSError(f"{call[0]} failed")

    async def start(self, host: str, port: str) -> None:
        self._record("start", host, port)

    async def stop(self) -> None:
        self._record("stop")

    async def stop_server(self) -> None:
        self._record("stop_server")
