"""Input binding capability interface."""

import abc
from collections.abc import Callable
from typing import Any

# pylint: disable=too-few-public-methods


class ServerBinding(abc.ABC):
    """Contract for receiving events from input bindings."""

    @abc.abstractmethod
    def receive(self, binding_name: str, callback: Callable[[Any], Any]) -> None:
        """Deliver events from the `binding_name` input binding to `callback`.

        The callback receives the event's data payload.
        """
