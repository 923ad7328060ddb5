"""``dapr-appserver serve``: run a server until interrupted.

Builds a `DaprServer` from the options (each backed by the environment
variable the sidecar tooling sets), starts it and waits for SIGINT/SIGTERM,
then shuts it down for good.

Failure modes
- Invalid port → ``ClickException`` naming the error code.
- Transport fails to start or stop → ``ClickException`` with the cause.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import signal

import click

from dapr_appserver.config import (
    DAPR_GRPC_PORT_ENV,
    DAPR_HOST_ENV,
    DAPR_HTTP_PORT_ENV,
    DEFAULT_DAPR_HOST,
    DEFAULT_DAPR_PORT,
    DEFAULT_SERVER_HOST,
    DEFAULT_SERVER_PORT,
    PROTOCOL_ENV,
    SERVER_HOST_ENV,
    SERVER_PORT_ENV,
    ClientOptions,
    CommunicationProtocol,
    ServerSettings,
    sidecar_port_env,
)
from dapr_appserver.errors import ConfigurationError, LifecycleError
from dapr_appserver.logging import log_settings
from dapr_appserver.server import DaprServer

logger = logging.getLogger(__name__)


async def run_until_interrupted(
    server: DaprServer, stop_event: asyncio.Event | None = None
) -> None:
    """Start `server`, wait for `stop_event` or a termination signal, then shut down.

    `stop_server()` runs even if starting fails or waiting is cancelled.
    """
    stop_event = stop_event or asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        # Signal handlers are unavailable on Windows event loops.
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.add_signal_handler(sig, stop_event.set)

    try:
        await server.start()
        await stop_event.wait()
        logger.info("Shutdown requested")
    finally:
        await server.stop_server()


@click.command()
@click.option(
    "--server-host",
    default=DEFAULT_SERVER_HOST,
    envvar=SERVER_HOST_ENV,
    show_default=True,
    show_envvar=True,
    help="Interface the application server listens on.",
)
@click.option(
    "--server-port",
    default=DEFAULT_SERVER_PORT,
    envvar=SERVER_PORT_ENV,
    show_default=True,
    show_envvar=True,
    help="Port the application server listens on.",
)
@click.option(
    "--dapr-host",
    default=DEFAULT_DAPR_HOST,
    envvar=DAPR_HOST_ENV,
    show_default=True,
    show_envvar=True,
    help="Host of the Dapr sidecar.",
)
@click.option(
    "--dapr-port",
    default=None,
    help=(
        "Port of the Dapr sidecar API for the selected protocol. Defaults to "
        f"${DAPR_HTTP_PORT_ENV} or ${DAPR_GRPC_PORT_ENV} (by protocol), then "
        f"{DEFAULT_DAPR_PORT}."
    ),
)
@click.option(
    "--protocol",
    type=click.Choice([p.value for p in CommunicationProtocol], case_sensitive=False),
    default=CommunicationProtocol.HTTP.value,
    envvar=PROTOCOL_ENV,
    show_default=True,
    show_envvar=True,
    help="Protocol spoken with the sidecar.",
)
@click.option(
    "--keep-alive/--no-keep-alive",
    default=True,
    show_default=True,
    help="Reuse connections to the sidecar.",
)
def serve(  # pylint: disable=too-many-arguments, too-many-positional-arguments
    server_host: str,
    server_port: str,
    dapr_host: str,
    dapr_port: str | None,
    protocol: str,
    keep_alive: bool,
) -> None:
    """Run the application server until interrupted."""
    communication_protocol = CommunicationProtocol.resolve(protocol)
    if dapr_port is None:
        dapr_port = (
            os.environ.get(sidecar_port_env(communication_protocol))
            or DEFAULT_DAPR_PORT
        )
    settings = ServerSettings(
        server_host=server_host,
        server_port=server_port,
        dapr_host=dapr_host,
        dapr_port=dapr_port,
        communication_protocol=communication_protocol,
        client_options=ClientOptions(is_keep_alive=keep_alive),
    )
    log_settings(logger, settings)
    try:
        server = DaprServer(settings)
    except ConfigurationError as exc:
        raise click.ClickException(
            f"{exc.code.value}: {exc.value!r} is not a valid port"
        ) from exc

    try:
        asyncio.run(run_until_interrupted(server))
    except LifecycleError as exc:
        raise click.ClickException(str(exc)) from exc
