"""Outbound sidecar client over gRPC, using a grpc.aio channel.

Calls the sidecar's `dapr.proto.runtime.v1.Dapr` service with JSON-encoded
messages that use the proto field names.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import grpc

from dapr_appserver.adapters import codec
from dapr_appserver.config import ClientOptions
from dapr_appserver.errors import SidecarRequestError
from dapr_appserver.interfaces.client import DaprClient, StateOperation
from dapr_appserver.interfaces.invoker import HttpMethod

logger = logging.getLogger(__name__)

DAPR_SERVICE = "dapr.proto.runtime.v1.Dapr"

KEEPALIVE_OPTIONS = (
    ("grpc.keepalive_time_ms", 30_000),
    ("grpc.keepalive_timeout_ms", 10_000),
    ("grpc.keepalive_permit_without_calls", 1),
)


class GrpcDaprClient(DaprClient):
    """Calls the sidecar's gRPC API.

    The channel is opened lazily on the first call. With `is_keep_alive`
    enabled the channel sends keepalive pings so idle connections survive.
    """

    def __init__(
        self, host: str, port: str, options: ClientOptions | None = None
    ) -> None:
        self.host = host
        self.port = port
        self.options = options or ClientOptions()
        self.target = f"{host}:{port}"
        self._channel: grpc.aio.Channel | None = None

    def _ensure_channel(self) -> grpc.aio.Channel:
        if self._channel is None:
            channel_options = KEEPALIVE_OPTIONS if self.options.is_keep_alive else ()
            self._channel = grpc.aio.insecure_channel(
                self.target, options=list(channel_options)
            )
            logger.debug(
                "Opened sidecar channel to %s (keep-alive=%s)",
                self.target,
                self.options.is_keep_alive,
            )
        return self._channel

    async def _call(self, operation: str, method: str, message: dict) -> Any:
        rpc = self._ensure_channel().unary_unary(
            f"/{DAPR_SERVICE}/{method}",
            request_serializer=codec.encode,
            response_deserializer=codec.decode,
        )
        try:
            return await rpc(message)
        except grpc.aio.AioRpcError as exc:
            raise SidecarRequestError(
                operation, exc.details() or exc.code().name, exc.code().value[0]
            ) from exc

    # --- DaprClient ---

    async def publish(self, pubsub_name: str, topic: str, data: Any) -> None:
        await self._call(
            "publish",
            "PublishEvent",
            {"pubsub_name": pubsub_name, "topic": topic, "data": data},
        )

    async def invoke(
        self,
        app_id: str,
        method_name: str,
        data: Any = None,
        http_method: HttpMethod = HttpMethod.POST,
    ) -> Any:
        response = await self._call(
            "invoke",
            "InvokeService",
            {
                "id": app_id,
                "message": {
                    "method": method_name,
                    "data": data,
                    "http_extension": {"verb": HttpMethod(http_method).value},
                },
            },
        )
        return (response or {}).get("data")

    async def send_binding(
        self,
        binding_name: str,
        operation: str,
        data: Any = None,
        metadata: Mapping[str, str] | None = None,
    ) -> Any:
        response = await self._call(
            "send_binding",
            "InvokeBinding",
            {
                "name": binding_name,
                "operation": operation,
                "data": data,
                "metadata": dict(metadata or {}),
            },
        )
        return (response or {}).get("data")

    async def get_actor_state(self, actor_type: str, actor_id: str, key: str) -> Any:
        response = await self._call(
            "get_actor_state",
            "GetActorState",
            {"actor_type": actor_type, "actor_id": actor_id, "key": key},
        )
        return (response or {}).get("data")

    async def execute_actor_state_transaction(
        self, actor_type: str, actor_id: str, operations: Sequence[StateOperation]
    ) -> None:
        await self._call(
            "execute_actor_state_transaction",
            "ExecuteActorStateTransaction",
            {
                "actor_type": actor_type,
                "actor_id": actor_id,
                "operations": [op.to_dict() for op in operations],
            },
        )

    async def close(self) -> None:
        if self._channel is not None:
            channel, self._channel = self._channel, None
            await channel.close()
            logger.debug("Closed sidecar channel to %s", self.target)
