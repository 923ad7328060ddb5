"""Transport server interface."""

import abc


class TransportServer(abc.ABC):
    """Contract for a protocol-specific listener the capabilities are bound to.

    A transport server is owned by exactly one `DaprServer`, which drives its
    lifecycle. Capability implementations register their handlers on it
    before it is started.
    """

    @abc.abstractmethod
    async def start(self, host: str, port: str) -> None:
        """Start listening on `host:port`.

        Completes once the listener is bound and accepting requests.
        """

    @abc.abstractmethod
    async def stop(self) -> None:
        """Stop listening, keeping registrations so a later `start` can re-bind."""

    @abc.abstractmethod
    async def stop_server(self) -> None:
        """Shut the server down for good and release all of its resources."""
