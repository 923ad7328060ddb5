"""Service invocation capability interface."""

import abc
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# pylint: disable=too-few-public-methods


class HttpMethod(str, Enum):
    """HTTP verbs a method can be invoked with."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"


@dataclass(frozen=True)
class InvokerRequest:
    """A service invocation delivered to a listener.

    Attributes:
        method: Name of the invoked method.
        body: Decoded request body (`None` when empty).
        query: Query parameters.
        headers: Request headers (HTTP) or invocation metadata (gRPC).
        http_method: Verb the method was invoked with.
    """

    method: str
    body: Any = None
    query: Mapping[str, str] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)
    http_method: HttpMethod = HttpMethod.POST


class ServerInvoker(abc.ABC):
    """Contract for serving methods other applications invoke through the sidecar."""

    @abc.abstractmethod
    def listen(
        self,
        method_name: str,
        callback: Callable[[InvokerRequest], Any],
        http_method: HttpMethod = HttpMethod.POST,
    ) -> None:
        """Route invocations of `method_name` with `http_method` to `callback`.

        Whatever the callback returns is encoded and sent back to the caller.
        """
