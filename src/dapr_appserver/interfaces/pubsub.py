"""Publish/subscribe capability interface."""

import abc
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Subscription:
    """A topic subscription advertised to the sidecar.

    Attributes:
        pubsub_name: Name of the pubsub component.
        topic: Topic name.
        route: Path (HTTP) the sidecar delivers events for this topic to.
    """

    pubsub_name: str
    topic: str
    route: str

    def to_dict(self) -> dict[str, str]:
        """Return the subscription in the sidecar's wire shape."""
        return {
            "pubsubname": self.pubsub_name,
            "topic": self.topic,
            "route": self.route,
        }


class ServerPubSub(abc.ABC):
    """Contract for receiving published events."""

    @abc.abstractmethod
    def subscribe(
        self,
        pubsub_name: str,
        topic: str,
        callback: Callable[[Any], Any],
        route: str | None = None,
    ) -> Subscription:
        """Subscribe `callback` to `topic` on the `pubsub_name` component.

        The callback receives the event's data payload. Returning normally
        acknowledges the event; raising asks the sidecar to redeliver it.
        """

    @abc.abstractmethod
    def get_subscriptions(self) -> list[Subscription]:
        """Return all subscriptions registered so far."""
