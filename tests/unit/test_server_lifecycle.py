"""Unit tests for the `DaprServer` lifecycle.

The transport server is replaced with `FakeTransport` by swapping the HTTP
entry of the protocol builder map, so every transport call is recorded and
can be made to fail.
"""

from __future__ import annotations

import pytest

from dapr_appserver import DaprServer, LifecycleState
from dapr_appserver.bootstrap import PROTOCOL_BUILDERS, BuildContext, ProtocolBundle
from dapr_appserver.bootstrap.bootstrap import build_http
from dapr_appserver.config import CommunicationProtocol, ServerSettings
from dapr_appserver.errors import ShutdownError, StartupError
from tests.fakes import FakeDaprClient, FakeTransport

# pylint: disable=redefined-outer-name


@pytest.fixture
def server(monkeypatch, fake_transport: FakeTransport, fake_client: FakeDaprClient):
    """A server whose transport is `fake_transport` and client `fake_client`."""

    def build_fake(context: BuildContext) -> ProtocolBundle:
        return ProtocolBundle(
            server=fake_transport, capabilities=build_http(context).capabilities
        )

    monkeypatch.setitem(PROTOCOL_BUILDERS, CommunicationProtocol.HTTP, build_fake)
    return DaprServer(
        ServerSettings(server_host="0.0.0.0", server_port="3000", dapr_port="3500"),
        client_factory=lambda settings: fake_client,
    )


class TestStart:
    """Tests for `start`."""

    @staticmethod
    @pytest.mark.asyncio
    async def test_start_binds_configured_address(
        server: DaprServer, fake_transport: FakeTransport
    ) -> None:
        """The transport is started once on the configured host and port."""
        await server.start()
        assert fake_transport.calls == [("start", "0.0.0.0", "3000")]
        assert server.state is LifecycleState.RUNNING

    @staticmethod
    @pytest.mark.asyncio
    async def test_double_start_rejected(
        server: DaprServer, fake_transport: FakeTransport
    ) -> None:
        """Starting a running server raises without touching the transport."""
        await server.start()
        with pytest.raises(StartupError, match="already running"):
            await server.start()
        assert fake_transport.calls == [("start", "0.0.0.0", "3000")]
        assert server.state is LifecycleState.RUNNING

    @staticmethod
    @pytest.mark.asyncio
    async def test_start_failure_wrapped(
        server: DaprServer, fake_transport: FakeTransport
    ) -> None:
        """Transport errors surface as StartupError; the state is unchanged."""
        fake_transport.fail_on.add("start")
        with pytest.raises(StartupError) as excinfo:
            await server.start()
        assert isinstance(excinfo.value.__cause__, OSError)
        assert server.state is LifecycleState.NOT_STARTED

    @staticmethod
    @pytest.mark.asyncio
    async def test_start_after_failure_retries(
        server: DaprServer, fake_transport: FakeTransport
    ) -> None:
        """Nothing is retried automatically, but the caller may try again."""
        fake_transport.fail_on.add("start")
        with pytest.raises(StartupError):
            await server.start()
        fake_transport.fail_on.clear()
        await server.start()
        assert server.state is LifecycleState.RUNNING
        assert len(fake_transport.calls) == 2


class TestStop:
    """Tests for `stop`."""

    @staticmethod
    @pytest.mark.asyncio
    async def test_stop_before_start_is_noop(
        server: DaprServer, fake_transport: FakeTransport
    ) -> None:
        await server.stop()
        assert not fake_transport.calls
        assert server.state is LifecycleState.NOT_STARTED

    @staticmethod
    @pytest.mark.asyncio
    async def test_start_stop_start(
        server: DaprServer, fake_transport: FakeTransport
    ) -> None:
        """A stopped server can be started again."""
        await server.start()
        await server.stop()
        assert server.state is LifecycleState.STOPPED
        await server.start()
        assert server.state is LifecycleState.RUNNING
        assert [call[0] for call in fake_transport.calls] == ["start", "stop", "start"]

    @staticmethod
    @pytest.mark.asyncio
    async def test_double_stop_is_noop(
        server: DaprServer, fake_transport: FakeTransport
    ) -> None:
        await server.start()
        await server.stop()
        await server.stop()
        assert [call[0] for call in fake_transport.calls] == ["start", "stop"]

    @staticmethod
    @pytest.mark.asyncio
    async def test_stop_does_not_close_client(
        server: DaprServer, fake_client: FakeDaprClient
    ) -> None:
        """Only a full shutdown releases the outbound client."""
        await server.start()
        await server.stop()
        assert fake_client.closed is False

    @staticmethod
    @pytest.mark.asyncio
    async def test_stop_failure_wrapped(
        server: DaprServer, fake_transport: FakeTransport
    ) -> None:
        await server.start()
        fake_transport.fail_on.add("stop")
        with pytest.raises(ShutdownError):
            await server.stop()
        assert server.state is LifecycleState.RUNNING


class TestStopServer:
    """Tests for `stop_server`."""

    @staticmethod
    @pytest.mark.asyncio
    async def test_shuts_down_and_closes_client(
        server: DaprServer, fake_transport: FakeTransport, fake_client: FakeDaprClient
    ) -> None:
        await server.start()
        await server.stop_server()
        assert [call[0] for call in fake_transport.calls] == ["start", "stop_server"]
        assert fake_client.closed is True
        assert server.state is LifecycleState.SHUT_DOWN

    @staticmethod
    @pytest.mark.asyncio
    async def test_allowed_before_start(
        server: DaprServer, fake_client: FakeDaprClient
    ) -> None:
        """A server that never started can still release its resources."""
        await server.stop_server()
        assert fake_client.closed is True
        assert server.state is LifecycleState.SHUT_DOWN

    @staticmethod
    @pytest.mark.asyncio
    async def test_idempotent(
        server: DaprServer, fake_transport: FakeTransport
    ) -> None:
        await server.stop_server()
        await server.stop_server()
        assert fake_transport.calls == [("stop_server",)]

    @staticmethod
    @pytest.mark.asyncio
    async def test_final(server: DaprServer) -> None:
        """A shut down server cannot be started again."""
        await server.stop_server()
        with pytest.raises(StartupError, match="shut down"):
            await server.start()

    @staticmethod
    @pytest.mark.asyncio
    async def test_stop_after_shutdown_is_noop(
        server: DaprServer, fake_transport: FakeTransport
    ) -> None:
        await server.stop_server()
        await server.stop()
        assert fake_transport.calls == [("stop_server",)]

    @staticmethod
    @pytest.mark.asyncio
    async def test_failure_wrapped(
        server: DaprServer, fake_transport: FakeTransport, fake_client: FakeDaprClient
    ) -> None:
        """Transport errors surface as ShutdownError; the state is unchanged."""
        await server.start()
        fake_transport.fail_on.add("stop_server")
        with pytest.raises(ShutdownError) as excinfo:
            await server.stop_server()
        assert isinstance(excinfo.value.__cause__, OSError)
        assert server.state is LifecycleState.RUNNING
        assert fake_client.closed is False

    @staticmethod
    @pytest.mark.asyncio
    async def test_client_failure_after_transport_shut_down(
        monkeypatch, server: DaprServer, fake_transport: FakeTransport
    ) -> None:
        """A client that fails to close does not leave the server RUNNING."""

        async def failing_close() -> None:
            raise OSError("connection reset")

        await server.start()
        monkeypatch.setattr(server.client, "close", failing_close)
        with pytest.raises(ShutdownError, match="connection reset"):
            await server.stop_server()
        assert server.state is LifecycleState.SHUT_DOWN
        with pytest.raises(StartupError, match="shut down"):
            await server.start()
        await server.stop_server()
        assert [call[0] for call in fake_transport.calls] == ["start", "stop_server"]


class TestContextManager:
    """`async with` starts the server and shuts it down on exit."""

    @staticmethod
    @pytest.mark.asyncio
    async def test_async_with(
        server: DaprServer, fake_transport: FakeTransport, fake_client: FakeDaprClient
    ) -> None:
        async with server as running:
            assert running is server
            assert server.state is LifecycleState.RUNNING
        assert server.state is LifecycleState.SHUT_DOWN
        assert [call[0] for call in fake_transport.calls] == ["start", "stop_server"]
        assert fake_client.closed is True

    @staticmethod
    @pytest.mark.asyncio
    async def test_shut_down_on_error(server: DaprServer) -> None:
        with pytest.raises(RuntimeError):
            async with server:
                raise RuntimeError("handler bug")
        assert server.state is LifecycleState.SHUT_DOWN
