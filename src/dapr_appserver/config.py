"""Configuration for DAPR-APPSERVER.

This module holds the settings object the server is built from, the
validation applied to it before anything else is constructed, and the
process-wide "ambient" channel used to publish the resolved ports.

Ambient channel
---------------
Resolved ports are written to the environment variables `DAPR_SERVER_PORT`
and `DAPR_CLIENT_PORT` so that code which does not receive the settings
object (child processes, helpers constructed later) can still discover them.
The environment is shared by the whole process: when several servers are
built with different ports, the last one built wins and anything reading the
variables afterwards sees the newer value. Collaborators inside this package
receive the `ServerSettings` instance instead and are not affected.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from dapr_appserver.errors import ConfigurationError, ConfigurationErrorCode

SERVER_HOST_ENV = "DAPR_SERVER_HOST"
SERVER_PORT_ENV = "DAPR_SERVER_PORT"
CLIENT_PORT_ENV = "DAPR_CLIENT_PORT"
DAPR_HOST_ENV = "DAPR_HOST"
DAPR_HTTP_PORT_ENV = "DAPR_HTTP_PORT"
DAPR_GRPC_PORT_ENV = "DAPR_GRPC_PORT"
PROTOCOL_ENV = "DAPR_PROTOCOL"

DEFAULT_SERVER_HOST = "127.0.0.1"
DEFAULT_SERVER_PORT = "50050"
DEFAULT_DAPR_HOST = "127.0.0.1"
DEFAULT_DAPR_PORT = "50051"

_PORT_PATTERN = re.compile(r"[0-9]+")


class CommunicationProtocol(str, Enum):
    """Wire protocol spoken between the application and its sidecar."""

    HTTP = "http"
    GRPC = "grpc"

    @classmethod
    def resolve(cls, value: object) -> CommunicationProtocol:
        """Map any value onto a protocol, falling back to HTTP.

        Members are returned unchanged. Strings match member names or values
        case-insensitively. Everything else, `None` included, resolves to
        `HTTP`; this never raises.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for member in cls:
                if key in (member.value, member.name.lower()):
                    return member
        return cls.HTTP


# Camel-case spellings are accepted so option dictionaries shared with other
# Dapr SDKs keep working.
_CLIENT_OPTION_ALIASES = {
    "is_keep_alive": "is_keep_alive",
    "isKeepAlive": "is_keep_alive",
}


@dataclass(frozen=True)
class ClientOptions:
    """Options for the outbound sidecar client.

    Attributes:
        is_keep_alive: Reuse connections to the sidecar between requests.
    """

    is_keep_alive: bool = True

    @classmethod
    def from_mapping(cls, options: Mapping[str, object]) -> ClientOptions:
        """Build options from a plain mapping, rejecting unrecognized keys.

        Raises:
            ConfigurationError: With code `UNKNOWN_CLIENT_OPTION` for any key
                that is not a recognized option, or `INVALID_CLIENT_OPTION`
                for a value that is not a bool.
        """
        kwargs: dict[str, bool] = {}
        for key, value in options.items():
            if (name := _CLIENT_OPTION_ALIASES.get(key)) is None:
                raise ConfigurationError(
                    ConfigurationErrorCode.UNKNOWN_CLIENT_OPTION, key
                )
            if not isinstance(value, bool):
                raise ConfigurationError(
                    ConfigurationErrorCode.INVALID_CLIENT_OPTION, value
                )
            kwargs[name] = value
        return cls(**kwargs)


def sidecar_port_env(protocol: CommunicationProtocol) -> str:
    """Return the environment variable holding the sidecar port for `protocol`."""
    if protocol is CommunicationProtocol.GRPC:
        return DAPR_GRPC_PORT_ENV
    return DAPR_HTTP_PORT_ENV


def _default_server_port() -> str:
    return read_ambient_port(SERVER_PORT_ENV) or DEFAULT_SERVER_PORT


@dataclass(frozen=True)
class ServerSettings:
    """Everything needed to build a `DaprServer`.

    Attributes:
        server_host: Interface the application server listens on.
        server_port: Port the application server listens on. Defaults to the
            ambient `DAPR_SERVER_PORT` value, then `"50050"`.
        dapr_host: Host of the Dapr sidecar.
        dapr_port: Port of the Dapr sidecar API (HTTP or gRPC, matching
            `communication_protocol`).
        communication_protocol: Transport used for both the server and the
            outbound client. Unknown values resolve to HTTP.
        client_options: Options for the outbound client. A plain mapping is
            accepted and converted with `ClientOptions.from_mapping`.

    Ports are kept as strings; use `validate_settings` before building
    anything from an instance.
    """

    server_host: str = DEFAULT_SERVER_HOST
    server_port: str = field(default_factory=_default_server_port)
    dapr_host: str = DEFAULT_DAPR_HOST
    dapr_port: str = DEFAULT_DAPR_PORT
    communication_protocol: CommunicationProtocol = CommunicationProtocol.HTTP
    client_options: ClientOptions = field(default_factory=ClientOptions)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "communication_protocol",
            CommunicationProtocol.resolve(self.communication_protocol),
        )
        if isinstance(self.client_options, Mapping):
            object.__setattr__(
                self, "client_options", ClientOptions.from_mapping(self.client_options)
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ServerSettings:
        """Build settings from environment variables, with defaults for anything unset.

        The sidecar port is read from `DAPR_GRPC_PORT` or `DAPR_HTTP_PORT`
        depending on the selected protocol.
        """
        env = os.environ if environ is None else environ
        protocol = CommunicationProtocol.resolve(env.get(PROTOCOL_ENV))
        return cls(
            server_host=env.get(SERVER_HOST_ENV) or DEFAULT_SERVER_HOST,
            server_port=env.get(SERVER_PORT_ENV) or DEFAULT_SERVER_PORT,
            dapr_host=env.get(DAPR_HOST_ENV) or DEFAULT_DAPR_HOST,
            dapr_port=env.get(sidecar_port_env(protocol)) or DEFAULT_DAPR_PORT,
            communication_protocol=protocol,
        )


def validate_port(value: object, code: ConfigurationErrorCode) -> str:
    """Return `value` if it is a string made only of decimal digits.

    Raises:
        ConfigurationError: With the given `code` otherwise.
    """
    if not isinstance(value, str) or not _PORT_PATTERN.fullmatch(value):
        raise ConfigurationError(code, value)
    return value


def validate_settings(settings: ServerSettings) -> ServerSettings:
    """Validate both ports, then publish them on the ambient channel.

    The server port is checked before the sidecar port. Nothing is published
    unless both are valid.

    Raises:
        ConfigurationError: `INVALID_SERVER_PORT` or `INVALID_SIDECAR_PORT`.
    """
    validate_port(settings.server_port, ConfigurationErrorCode.INVALID_SERVER_PORT)
    validate_port(settings.dapr_port, ConfigurationErrorCode.INVALID_SIDECAR_PORT)
    publish_ports(settings)
    return settings


def publish_ports(settings: ServerSettings) -> None:
    """Write the resolved server and sidecar ports to the ambient channel."""
    os.environ[SERVER_PORT_ENV] = settings.server_port
    os.environ[CLIENT_PORT_ENV] = settings.dapr_port


def read_ambient_port(name: str) -> str | None:
    """Read a port from the ambient channel, or `None` if it is unset or empty."""
    return os.environ.get(name) or None
