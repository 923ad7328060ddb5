"""Error definitions for DAPR-APPSERVER."""

from enum import Enum

# ============================================================================
#                           General errors
# ============================================================================


class DaprServerError(Exception):
    """Base class for all errors raised by this package."""


# ============================================================================
#                           Configuration errors
# ============================================================================


class ConfigurationErrorCode(str, Enum):
    """Identifies which configuration value was rejected."""

    INVALID_SERVER_PORT = "INVALID_SERVER_PORT"
    INVALID_SIDECAR_PORT = "INVALID_SIDECAR_PORT"
    UNKNOWN_CLIENT_OPTION = "UNKNOWN_CLIENT_OPTION"
    INVALID_CLIENT_OPTION = "INVALID_CLIENT_OPTION"


class ConfigurationError(DaprServerError):
    """Raised synchronously when server settings fail validation.

    Attributes:
        code (ConfigurationErrorCode): Which setting was rejected.
        value (object): The offending value.
    """

    def __init__(self, code: ConfigurationErrorCode, value: object) -> None:
        super().__init__(f"{code.value}: {value!r}")
        self.code = code
        self.value = value


# ============================================================================
#                           Lifecycle errors
# ============================================================================


class LifecycleError(DaprServerError):
    """Base class for failures of start/stop operations."""


class StartupError(LifecycleError):
    """Raised when the transport server could not be started."""


class ShutdownError(LifecycleError):
    """Raised when the transport server could not be stopped."""


class ServerStateError(DaprServerError):
    """Raised when an operation is not allowed in the server's current state."""


# ============================================================================
#                           Actor errors
# ============================================================================


class ActorsNotSupportedError(DaprServerError):
    """Raised when actor hosting is requested on a transport that cannot host actors."""

    def __init__(self, protocol: str) -> None:
        super().__init__(f"Actors cannot be hosted over {protocol}; use HTTP.")
        self.protocol = protocol


class ActorNotRegisteredError(DaprServerError):
    """Raised when a call targets an actor type that was never registered."""

    def __init__(self, actor_type: str) -> None:
        super().__init__(f"Actor type '{actor_type}' is not registered.")
        self.actor_type = actor_type


class ActorMethodNotFoundError(DaprServerError):
    """Raised when a call targets a method an actor type does not expose."""

    def __init__(self, actor_type: str, method_name: str) -> None:
        super().__init__(f"Actor type '{actor_type}' has no method '{method_name}'.")
        self.actor_type = actor_type
        self.method_name = method_name


# ============================================================================
#                           Sidecar errors
# ============================================================================


class SidecarRequestError(DaprServerError):
    """Raised when a call from the outbound client to the sidecar fails.

    Attributes:
        operation (str): Name of the client operation that failed.
        status (int | None): HTTP status or gRPC status code, when known.
    """

    def __init__(self, operation: str, detail: str, status: int | None = None) -> None:
        super().__init__(f"Sidecar request '{operation}' failed: {detail}")
        self.operation = operation
        self.status = status
