"""RPC-style transport server built on grpc.aio.

Serves the sidecar's `dapr.proto.runtime.v1.AppCallback` service through a
generic handler, so no generated stubs are needed. Messages are JSON objects
using the field names of the AppCallback protos (`pubsub_name`, `topic`,
`data`, `http_extension`, ...).

Capabilities register handlers in the server's tables; the tables are read on
every call, so registrations made after `start` take effect immediately.

Lifecycle
---------
- `start(host, port)`: builds a fresh `grpc.aio.Server`, binds it and starts it.
- `stop()`: stops the server, letting in-flight calls finish within
  `grace_period`. A gRPC server cannot be restarted, so a later `start`
  builds a new one from the same tables.
- `stop_server()`: stops immediately, cancelling in-flight calls. Final.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any
from urllib.parse import parse_qsl

import grpc

from dapr_appserver.adapters import codec
from dapr_appserver.errors import ServerStateError
from dapr_appserver.interfaces.invoker import HttpMethod, InvokerRequest
from dapr_appserver.interfaces.pubsub import Subscription
from dapr_appserver.interfaces.transport import TransportServer
from dapr_appserver.utils.callbacks import call_handler, handler_name

logger = logging.getLogger(__name__)

APP_CALLBACK_SERVICE = "dapr.proto.runtime.v1.AppCallback"

STATUS_SUCCESS = "SUCCESS"
STATUS_RETRY = "RETRY"
STATUS_DROP = "DROP"

Callback = Callable[[Any], Any]


def _unary(handler: Callable[..., Any]) -> grpc.RpcMethodHandler:
    return grpc.unary_unary_rpc_method_handler(
        handler,
        request_deserializer=codec.decode,
        response_serializer=codec.encode,
    )


class GrpcServer(TransportServer):
    """Application server the sidecar calls over gRPC.

    Args:
        grace_period: Seconds `stop()` waits for in-flight calls.
    """

    def __init__(self, grace_period: float = 5.0) -> None:
        self.grace_period = grace_period
        self.bound_port: int | None = None
        self._server: grpc.aio.Server | None = None
        self._subscriptions: dict[tuple[str, str], tuple[Subscription, Callback]] = {}
        self._bindings: dict[str, Callback] = {}
        self._methods: dict[tuple[str, HttpMethod], Callback] = {}

    # --- Registration ---

    def add_topic_handler(self, subscription: Subscription, callback: Callback) -> None:
        """Deliver events for `subscription` to `callback`."""
        key = (subscription.pubsub_name, subscription.topic)
        self._subscriptions[key] = (subscription, callback)

    def add_binding_handler(self, binding_name: str, callback: Callback) -> None:
        """Deliver events from the `binding_name` input binding to `callback`."""
        self._bindings[binding_name] = callback

    def add_method_handler(
        self, method_name: str, http_method: HttpMethod, callback: Callback
    ) -> None:
        """Route invocations of `method_name` with `http_method` to `callback`."""
        self._methods[(method_name, http_method)] = callback

    @property
    def subscriptions(self) -> list[Subscription]:
        """Subscriptions advertised to the sidecar."""
        return [subscription for subscription, _ in self._subscriptions.values()]

    @property
    def is_listening(self) -> bool:
        """True while a server is running."""
        return self._server is not None

    # --- TransportServer ---

    async def start(self, host: str, port: str) -> None:
        if self._server is not None:
            raise ServerStateError("gRPC server is already listening")
        server = grpc.aio.server()
        server.add_generic_rpc_handlers((self._build_handler(),))
        self.bound_port = server.add_insecure_port(f"{host}:{port}")
        await server.start()
        self._server = server
        logger.info("gRPC server listening on %s:%s", host, self.bound_port)

    async def stop(self) -> None:
        if self._server is None:
            return
        server, self._server = self._server, None
        await server.stop(self.grace_period)
        logger.info("gRPC server stopped listening")

    async def stop_server(self) -> None:
        if self._server is None:
            return
        server, self._server = self._server, None
        await server.stop(None)
        logger.info("gRPC server shut down")

    # --- AppCallback ---

    def _build_handler(self) -> grpc.GenericRpcHandler:
        return grpc.method_handlers_generic_handler(
            APP_CALLBACK_SERVICE,
            {
                "OnInvoke": _unary(self.on_invoke),
                "ListTopicSubscriptions": _unary(self.list_topic_subscriptions),
                "OnTopicEvent": _unary(self.on_topic_event),
                "ListInputBindings": _unary(self.list_input_bindings),
                "OnBindingEvent": _unary(self.on_binding_event),
            },
        )

    async def list_topic_subscriptions(self, request: Any, context: Any) -> dict:
        # pylint: disable=unused-argument
        return {
            "subscriptions": [
                {"pubsub_name": s.pubsub_name, "topic": s.topic}
                for s in self.subscriptions
            ]
        }

    async def list_input_bindings(self, request: Any, context: Any) -> dict:
        # pylint: disable=unused-argument
        return {"bindings": list(self._bindings)}

    async def on_topic_event(self, request: Any, context: Any) -> dict:
        # pylint: disable=unused-argument
        request = request or {}
        key = (request.get("pubsub_name", ""), request.get("topic", ""))
        if (entry := self._subscriptions.get(key)) is None:
            logger.warning("No subscriber for %s/%s; dropping event", *key)
            return {"status": STATUS_DROP}
        _, callback = entry
        try:
            await call_handler(callback, request.get("data"))
        except Exception:  # pylint: disable=broad-except
            logger.exception(
                "Subscriber %s failed on %s/%s; asking for redelivery",
                handler_name(callback),
                *key,
            )
            return {"status": STATUS_RETRY}
        return {"status": STATUS_SUCCESS}

    async def on_binding_event(self, request: Any, context: Any) -> dict:
        request = request or {}
        name = request.get("name", "")
        if (callback := self._bindings.get(name)) is None:
            await context.abort(
                grpc.StatusCode.NOT_FOUND, f"No handler for binding {name}"
            )
        try:
            result = await call_handler(callback, request.get("data"))
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception(
                "Binding handler %s failed for %s", handler_name(callback), name
            )
            error = str(exc)
        else:
            return {"data": result}
        await context.abort(grpc.StatusCode.INTERNAL, error)
        return {}  # pragma: no cover - abort() raises

    async def on_invoke(self, request: Any, context: Any) -> dict:
        request = request or {}
        method_name = request.get("method", "")
        extension = request.get("http_extension") or {}
        try:
            verb = HttpMethod(str(extension.get("verb", "POST")).upper())
        except ValueError:
            verb = HttpMethod.POST
        if (callback := self._methods.get((method_name, verb))) is None:
            await context.abort(
                grpc.StatusCode.UNIMPLEMENTED,
                f"No handler for {verb.value} {method_name}",
            )
        invocation = InvokerRequest(
            method=method_name,
            body=request.get("data"),
            query=dict(parse_qsl(extension.get("querystring", ""))),
            headers={key: value for key, value in context.invocation_metadata() or ()},
            http_method=verb,
        )
        try:
            result = await call_handler(callback, invocation)
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception(
                "Method %s (%s) failed in %s",
                method_name,
                verb.value,
                handler_name(callback),
            )
            error = str(exc)
        else:
            return {"data": result, "content_type": "application/json"}
        await context.abort(grpc.StatusCode.INTERNAL, error)
        return {}  # pragma: no cover - abort() raises
