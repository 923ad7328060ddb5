"""Publish/subscribe over gRPC."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from dapr_appserver.interfaces.pubsub import ServerPubSub, Subscription

from .server import GrpcServer

logger = logging.getLogger(__name__)


class GrpcServerPubSub(ServerPubSub):
    """Receives topic events through `AppCallback.OnTopicEvent`.

    Subscriptions are advertised through `ListTopicSubscriptions`. The route
    is informational over gRPC; events are matched on pubsub name and topic.
    """

    def __init__(self, server: GrpcServer) -> None:
        self.server = server

    def subscribe(
        self,
        pubsub_name: str,
        topic: str,
        callback: Callable[[Any], Any],
        route: str | None = None,
    ) -> Subscription:
        subscription = Subscription(
            pubsub_name, topic, route or f"/{pubsub_name}--{topic}"
        )
        self.server.add_topic_handler(subscription, callback)
        logger.info("Subscribed to %s/%s", pubsub_name, topic)
        return subscription

    def get_subscriptions(self) -> list[Subscription]:
        return self.server.subscriptions
