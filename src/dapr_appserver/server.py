"""The `DaprServer` facade.

A `DaprServer` is built from a `ServerSettings` in three strictly sequential
steps: the settings are validated (and the ports published on the ambient
channel), the outbound sidecar client is built, then the transport server and
its capabilities are built for the configured protocol. A failure at any step
raises before the next one runs, so no partially built server is returned.

Lifecycle
---------
    NOT_STARTED --start()--> RUNNING --stop()--> STOPPED --start()--> RUNNING
    any state but SHUT_DOWN --stop_server()--> SHUT_DOWN

- `start()` while RUNNING, or after SHUT_DOWN, raises `StartupError`.
- `stop()` outside RUNNING does nothing.
- `stop_server()` releases the transport and closes the client; once
  SHUT_DOWN, further calls do nothing.
- Transport failures are re-raised as `StartupError` / `ShutdownError` and
  leave the state unchanged. Nothing is retried.

Example
-------
    server = DaprServer(ServerSettings(server_port="3000"))
    server.pubsub.subscribe("pubsub", "orders", handle_order)
    await server.start()
    ...
    await server.stop_server()
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from dapr_appserver.bootstrap import (
    BuildContext,
    CapabilitySet,
    build_client,
    build_protocol,
)
from dapr_appserver.config import (
    DEFAULT_DAPR_HOST,
    DEFAULT_DAPR_PORT,
    DEFAULT_SERVER_HOST,
    ClientOptions,
    CommunicationProtocol,
    ServerSettings,
    validate_settings,
)
from dapr_appserver.errors import ShutdownError, StartupError
from dapr_appserver.interfaces import (
    DaprClient,
    ServerActor,
    ServerBinding,
    ServerInvoker,
    ServerPubSub,
    TransportServer,
)

logger = logging.getLogger(__name__)

ClientFactory = Callable[[ServerSettings], DaprClient]


class LifecycleState(str, Enum):
    """Lifecycle states of a `DaprServer`."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    STOPPED = "stopped"
    SHUT_DOWN = "shut_down"


class DaprServer:
    """Application-side server for the Dapr sidecar.

    Args:
        settings: Server settings; defaults to `ServerSettings()`.
        client_factory: Builds the outbound sidecar client from the settings.

    Raises:
        ConfigurationError: If a port is not made only of decimal digits.
    """

    def __init__(
        self,
        settings: ServerSettings | None = None,
        *,
        client_factory: ClientFactory = build_client,
    ) -> None:
        self._settings = validate_settings(settings or ServerSettings())
        self._client = client_factory(self._settings)
        bundle = build_protocol(
            self._settings.communication_protocol,
            BuildContext(settings=self._settings, client=self._client),
        )
        self._server = bundle.server
        self._capabilities = bundle.capabilities
        self._state = LifecycleState.NOT_STARTED
        logger.debug(
            "Built %s server for %s:%s (sidecar %s:%s)",
            self._settings.communication_protocol.name,
            self._settings.server_host,
            self._settings.server_port,
            self._settings.dapr_host,
            self._settings.dapr_port,
        )

    @classmethod
    def from_options(  # pylint: disable=too-many-arguments
        cls,
        server_host: str = DEFAULT_SERVER_HOST,
        server_port: str | None = None,
        dapr_host: str = DEFAULT_DAPR_HOST,
        dapr_port: str = DEFAULT_DAPR_PORT,
        communication_protocol: object = CommunicationProtocol.HTTP,
        client_options: ClientOptions | Mapping[str, Any] | None = None,
        *,
        client_factory: ClientFactory = build_client,
    ) -> DaprServer:
        """Build a server from individual options.

        An omitted `server_port` falls back to the ambient
        `DAPR_SERVER_PORT` value, then `"50050"`.
        """
        kwargs: dict[str, Any] = {
            "server_host": server_host,
            "dapr_host": dapr_host,
            "dapr_port": dapr_port,
            "communication_protocol": communication_protocol,
        }
        if server_port is not None:
            kwargs["server_port"] = server_port
        if client_options is not None:
            kwargs["client_options"] = client_options
        return cls(ServerSettings(**kwargs), client_factory=client_factory)

    # --- Capabilities ---

    @property
    def capabilities(self) -> CapabilitySet:
        """All four capability handles."""
        return self._capabilities

    @property
    def pubsub(self) -> ServerPubSub:
        """Publish/subscribe capability."""
        return self._capabilities.pubsub

    @property
    def binding(self) -> ServerBinding:
        """Input binding capability."""
        return self._capabilities.binding

    @property
    def invoker(self) -> ServerInvoker:
        """Service invocation capability."""
        return self._capabilities.invoker

    @property
    def actor(self) -> ServerActor:
        """Actor hosting capability."""
        return self._capabilities.actor

    # --- Accessors ---

    @property
    def settings(self) -> ServerSettings:
        return self._settings

    @property
    def client(self) -> DaprClient:
        """Outbound client for calls into the sidecar. Owned by this server."""
        return self._client

    @property
    def state(self) -> LifecycleState:
        return self._state

    def get_dapr_client(self) -> TransportServer:
        """Return the underlying transport server.

        The name is kept for compatibility with the other Dapr SDKs; use
        `client` for the outbound sidecar client.
        """
        return self._server

    def get_dapr_host(self) -> str:
        return self._settings.dapr_host

    def get_dapr_port(self) -> str:
        return self._settings.dapr_port

    # --- Lifecycle ---

    async def start(self) -> None:
        """Start the transport server on the configured host and port.

        Raises:
            StartupError: If the server is running or shut down, or if the
                transport fails to start.
        """
        if self._state is LifecycleState.RUNNING:
            raise StartupError("Server is already running; call stop() first")
        if self._state is LifecycleState.SHUT_DOWN:
            raise StartupError("Server has been shut down and cannot be restarted")

        host, port = self._settings.server_host, self._settings.server_port
        logger.info("Starting server on %s:%s", host, port)
        try:
            await self._server.start(host, port)
        except Exception as exc:
            logger.exception("Failed to start server on %s:%s", host, port)
            raise StartupError(
                f"Failed to start server on {host}:{port}: {exc}"
            ) from exc
        self._state = LifecycleState.RUNNING

    async def stop(self) -> None:
        """Stop listening; a later `start()` binds again.

        Raises:
            ShutdownError: If the transport fails to stop.
        """
        if self._state is not LifecycleState.RUNNING:
            logger.debug("stop() ignored: server is %s", self._state.value)
            return
        try:
            await self._server.stop()
        except Exception as exc:
            logger.exception("Failed to stop server")
            raise ShutdownError(f"Failed to stop server: {exc}") from exc
        self._state = LifecycleState.STOPPED
        logger.info("Server stopped")

    async def stop_server(self) -> None:
        """Shut the transport server down for good and close the client.

        Once the transport has shut down the server is `SHUT_DOWN`, even if
        closing the client then fails.

        Raises:
            ShutdownError: If the transport or the client fails to close.
        """
        if self._state is LifecycleState.SHUT_DOWN:
            logger.debug("stop_server() ignored: server is already shut down")
            return
        try:
            await self._server.stop_server()
        except Exception as exc:
            logger.exception("Failed to shut server down")
            raise ShutdownError(f"Failed to shut server down: {exc}") from exc
        self._state = LifecycleState.SHUT_DOWN
        try:
            await self._client.close()
        except Exception as exc:
            logger.exception("Failed to close the sidecar client")
            raise ShutdownError(f"Failed to close the sidecar client: {exc}") from exc
        logger.info("Server shut down")

    async def __aenter__(self) -> DaprServer:
        await self.start()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.stop_server()
