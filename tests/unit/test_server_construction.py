"""Unit tests for building a `DaprServer`.

Covers:
1) Defaults and option handling.
2) Strict construction order: validation, then client, then protocol.
3) Accessors, including the transport returned by `get_dapr_client`.
4) The ambient channel when several servers are built in one process.
"""

from __future__ import annotations

import os

import pytest

from dapr_appserver import DaprServer, LifecycleState
from dapr_appserver.adapters.grpc import GrpcServer
from dapr_appserver.adapters.http import HttpDaprClient, HttpServer
from dapr_appserver.config import (
    CLIENT_PORT_ENV,
    SERVER_PORT_ENV,
    ClientOptions,
    CommunicationProtocol,
    ServerSettings,
)
from dapr_appserver.errors import ConfigurationError, ConfigurationErrorCode
from tests.fakes import FakeDaprClient


class RecordingFactory:
    """Client factory that records the settings it was called with."""

    def __init__(self) -> None:
        self.calls: list[ServerSettings] = []
        self.clients: list[FakeDaprClient] = []

    def __call__(self, settings: ServerSettings) -> FakeDaprClient:
        self.calls.append(settings)
        client = FakeDaprClient(settings)
        self.clients.append(client)
        return client


class TestDefaults:
    """A server built with no arguments."""

    @staticmethod
    def test_default_settings() -> None:
        """Defaults are HTTP on 127.0.0.1:50050 with the sidecar on 50051."""
        server = DaprServer()
        assert server.settings.server_host == "127.0.0.1"
        assert server.settings.server_port == "50050"
        assert server.get_dapr_host() == "127.0.0.1"
        assert server.get_dapr_port() == "50051"
        assert server.settings.communication_protocol is CommunicationProtocol.HTTP
        assert isinstance(server.get_dapr_client(), HttpServer)
        assert isinstance(server.client, HttpDaprClient)

    @staticmethod
    def test_starts_not_started() -> None:
        assert DaprServer().state is LifecycleState.NOT_STARTED

    @staticmethod
    def test_ambient_server_port_used(monkeypatch) -> None:
        """An omitted server port is taken from DAPR_SERVER_PORT."""
        monkeypatch.setenv(SERVER_PORT_ENV, "4321")
        assert DaprServer().settings.server_port == "4321"


class TestFromOptions:
    """Tests for `DaprServer.from_options`."""

    @staticmethod
    def test_all_options() -> None:
        """Every option reaches the settings."""
        server = DaprServer.from_options(
            "0.0.0.0",
            "3000",
            "sidecar",
            "3500",
            CommunicationProtocol.GRPC,
            {"isKeepAlive": False},
            client_factory=FakeDaprClient,
        )
        assert server.settings == ServerSettings(
            server_host="0.0.0.0",
            server_port="3000",
            dapr_host="sidecar",
            dapr_port="3500",
            communication_protocol=CommunicationProtocol.GRPC,
            client_options=ClientOptions(is_keep_alive=False),
        )
        assert isinstance(server.get_dapr_client(), GrpcServer)

    @staticmethod
    def test_omitted_server_port_uses_ambient(monkeypatch) -> None:
        monkeypatch.setenv(SERVER_PORT_ENV, "4000")
        server = DaprServer.from_options(client_factory=FakeDaprClient)
        assert server.settings.server_port == "4000"

    @staticmethod
    def test_protocol_string_accepted() -> None:
        """Protocol names are resolved case-insensitively."""
        server = DaprServer.from_options(
            communication_protocol="GRPC", client_factory=FakeDaprClient
        )
        assert server.settings.communication_protocol is CommunicationProtocol.GRPC

    @staticmethod
    def test_unknown_client_option_rejected() -> None:
        with pytest.raises(ConfigurationError) as excinfo:
            DaprServer.from_options(client_options={"retries": 3})
        assert excinfo.value.code is ConfigurationErrorCode.UNKNOWN_CLIENT_OPTION


class TestConstructionOrder:
    """Validation runs first; nothing is built from rejected settings."""

    @staticmethod
    def test_factory_receives_validated_settings() -> None:
        """The client factory is called once with the server's settings."""
        factory = RecordingFactory()
        settings = ServerSettings(server_port="3000", dapr_port="3500")
        server = DaprServer(settings, client_factory=factory)
        assert factory.calls == [settings]
        assert server.client is factory.clients[0]

    @staticmethod
    @pytest.mark.parametrize(
        ("settings", "code"),
        [
            (
                ServerSettings(server_port="abc", dapr_port="3500"),
                ConfigurationErrorCode.INVALID_SERVER_PORT,
            ),
            (
                ServerSettings(server_port="3000", dapr_port="35OO"),
                ConfigurationErrorCode.INVALID_SIDECAR_PORT,
            ),
            (
                ServerSettings(server_port="abc", dapr_port="xyz"),
                ConfigurationErrorCode.INVALID_SERVER_PORT,
            ),
        ],
    )
    def test_invalid_ports_build_nothing(
        settings: ServerSettings, code: ConfigurationErrorCode
    ) -> None:
        """No client is built and nothing is published when a port is bad."""
        factory = RecordingFactory()
        with pytest.raises(ConfigurationError) as excinfo:
            DaprServer(settings, client_factory=factory)
        assert excinfo.value.code is code
        assert not factory.calls
        assert SERVER_PORT_ENV not in os.environ
        assert CLIENT_PORT_ENV not in os.environ

    @staticmethod
    def test_factory_errors_propagate() -> None:
        """A failing client factory aborts construction unchanged."""

        def broken(settings: ServerSettings) -> FakeDaprClient:
            raise RuntimeError("no client")

        with pytest.raises(RuntimeError, match="no client"):
            DaprServer(client_factory=broken)


class TestAccessors:
    """Capability handles and accessors."""

    @staticmethod
    @pytest.mark.parametrize("protocol", list(CommunicationProtocol))
    def test_capabilities_are_stable(protocol: CommunicationProtocol) -> None:
        """The properties return the same handles as the capability set."""
        server = DaprServer(
            ServerSettings(communication_protocol=protocol),
            client_factory=FakeDaprClient,
        )
        caps = server.capabilities
        assert server.pubsub is caps.pubsub
        assert server.binding is caps.binding
        assert server.invoker is caps.invoker
        assert server.actor is caps.actor
        assert server.pubsub is server.pubsub

    @staticmethod
    def test_get_dapr_client_returns_transport() -> None:
        """`get_dapr_client` is the transport server, not the outbound client."""
        server = DaprServer(client_factory=FakeDaprClient)
        assert isinstance(server.get_dapr_client(), HttpServer)
        assert server.get_dapr_client() is not server.client

    @staticmethod
    def test_http_actor_uses_server_client() -> None:
        """The HTTP actor capability shares the server's outbound client."""
        server = DaprServer(client_factory=FakeDaprClient)
        assert server.actor.client is server.client

    @staticmethod
    def test_grpc_actor_has_no_client() -> None:
        """The gRPC actor capability is built without a client."""
        server = DaprServer(
            ServerSettings(communication_protocol=CommunicationProtocol.GRPC),
            client_factory=FakeDaprClient,
        )
        assert all(v is not server.client for v in vars(server.actor).values())


class TestAmbientChannel:
    """Resolved ports are published on the process environment."""

    @staticmethod
    def test_ports_published() -> None:
        DaprServer(
            ServerSettings(server_port="3000", dapr_port="3500"),
            client_factory=FakeDaprClient,
        )
        assert os.environ[SERVER_PORT_ENV] == "3000"
        assert os.environ[CLIENT_PORT_ENV] == "3500"

    @staticmethod
    def test_last_server_built_wins() -> None:
        """With two servers, the environment reflects the one built last."""
        first = DaprServer(
            ServerSettings(server_port="3000", dapr_port="3500"),
            client_factory=FakeDaprClient,
        )
        second = DaprServer(
            ServerSettings(server_port="4000", dapr_port="4500"),
            client_factory=FakeDaprClient,
        )
        assert os.environ[SERVER_PORT_ENV] == "4000"
        assert os.environ[CLIENT_PORT_ENV] == "4500"
        # Each server still holds its own settings.
        assert first.settings.server_port == "3000"
        assert second.settings.server_port == "4000"

    @staticmethod
    def test_published_port_becomes_next_default() -> None:
        """A server built without a port picks up the previous server's port."""
        DaprServer(
            ServerSettings(server_port="3100", dapr_port="3500"),
            client_factory=FakeDaprClient,
        )
        assert DaprServer(client_factory=FakeDaprClient).settings.server_port == "3100"
