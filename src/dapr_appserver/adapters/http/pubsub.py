"""Publish/subscribe over HTTP."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from aiohttp import web

from dapr_appserver.interfaces.pubsub import ServerPubSub, Subscription
from dapr_appserver.utils.callbacks import call_handler, handler_name

from .server import HttpServer, read_body

logger = logging.getLogger(__name__)

STATUS_SUCCESS = "SUCCESS"
STATUS_RETRY = "RETRY"


class HttpServerPubSub(ServerPubSub):
    """Receives topic events the sidecar POSTs to per-subscription routes.

    Subscriptions are advertised on `GET /dapr/subscribe`. Each event arrives
    as a CloudEvent; the callback gets its `data` field. The sidecar is told
    to redeliver (`RETRY`) when the callback raises.
    """

    def __init__(self, server: HttpServer) -> None:
        self.server = server

    def subscribe(
        self,
        pubsub_name: str,
        topic: str,
        callback: Callable[[Any], Any],
        route: str | None = None,
    ) -> Subscription:
        path = route or f"{pubsub_name}--{topic}"
        if not path.startswith("/"):
            path = f"/{path}"
        subscription = Subscription(pubsub_name, topic, path)

        async def handle_event(request: web.Request) -> web.Response:
            event = await read_body(request)
            data = event.get("data") if isinstance(event, dict) else event
            try:
                await call_handler(callback, data)
            except Exception:  # pylint: disable=broad-except
                logger.exception(
                    "Subscriber %s failed on %s/%s; asking for redelivery",
                    handler_name(callback),
                    pubsub_name,
                    topic,
                )
                return web.json_response({"status": STATUS_RETRY})
            return web.json_response({"status": STATUS_SUCCESS})

        self.server.add_route("POST", path, handle_event)
        self.server.add_subscription(subscription)
        logger.info("Subscribed to %s/%s on %s", pubsub_name, topic, path)
        return subscription

    def get_subscriptions(self) -> list[Subscription]:
        return self.server.subscriptions
