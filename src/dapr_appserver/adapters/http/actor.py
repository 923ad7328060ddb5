"""Actor hosting over HTTP."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from aiohttp import web

from dapr_appserver.actors import ActorRuntime
from dapr_appserver.errors import ActorMethodNotFoundError, ActorNotRegisteredError
from dapr_appserver.interfaces.actor import ServerActor

from .server import HttpServer, encode_response, read_body

if TYPE_CHECKING:
    from dapr_appserver.interfaces.client import DaprClient

logger = logging.getLogger(__name__)

ACTOR_PATH = "/actors/{actor_type}/{actor_id}"


class HttpServerActor(ServerActor):
    """Hosts actors through the sidecar's HTTP actor callback routes.

    Actor state is read and written through `client`, which this capability
    shares with the owning `DaprServer` and never closes.
    """

    def __init__(self, server: HttpServer, client: DaprClient) -> None:
        self.server = server
        self.client = client
        self.runtime = ActorRuntime(client)
        self._initialized = False

    def register_actor(self, actor_cls: type[Any]) -> None:
        self.runtime.register(actor_cls)

    def get_registered_actors(self) -> list[str]:
        return self.runtime.entities()

    async def deactivate_actor(self, actor_type: str, actor_id: str) -> None:
        await self.runtime.deactivate(actor_type, actor_id)

    async def init(self) -> None:
        if self._initialized:
            return
        add = self.server.add_route
        add("GET", "/dapr/config", self._handle_config)
        add("GET", "/healthz", self._handle_health)
        add("DELETE", ACTOR_PATH, self._handle_deactivate)
        add("PUT", ACTOR_PATH + "/method/timer/{name}", self._handle_timer)
        add("PUT", ACTOR_PATH + "/method/remind/{name}", self._handle_reminder)
        add("PUT", ACTOR_PATH + "/method/{method}", self._handle_method)
        self._initialized = True
        logger.info("Actor routes ready for %s", self.runtime.entities())

    # --- Handlers ---

    async def _handle_config(self, request: web.Request) -> web.Response:
        # pylint: disable=unused-argument
        return web.json_response(self.runtime.config_document())

    async def _handle_health(self, request: web.Request) -> web.Response:
        # pylint: disable=unused-argument
        return web.Response(status=200)

    async def _handle_deactivate(self, request: web.Request) -> web.Response:
        info = request.match_info
        return await self._dispatch(
            self.runtime.deactivate(info["actor_type"], info["actor_id"]),
            empty_result=True,
        )

    async def _handle_method(self, request: web.Request) -> web.Response:
        info = request.match_info
        body = await read_body(request)
        return await self._dispatch(
            self.runtime.invoke(
                info["actor_type"], info["actor_id"], info["method"], body
            )
        )

    async def _handle_timer(self, request: web.Request) -> web.Response:
        info = request.match_info
        body = await read_body(request) or {}
        return await self._dispatch(
            self.runtime.fire_timer(
                info["actor_type"], info["actor_id"], info["name"], body
            ),
            empty_result=True,
        )

    async def _handle_reminder(self, request: web.Request) -> web.Response:
        info = request.match_info
        body = await read_body(request) or {}
        return await self._dispatch(
            self.runtime.fire_reminder(
                info["actor_type"], info["actor_id"], info["name"], body
            ),
            empty_result=True,
        )

    @staticmethod
    async def _dispatch(call: Any, empty_result: bool = False) -> web.Response:
        try:
            result = await call
        except (ActorNotRegisteredError, ActorMethodNotFoundError) as exc:
            logger.warning("%s", exc)
            return encode_response({"error": str(exc)}, status=404)
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception("Actor call failed")
            return encode_response({"error": str(exc)}, status=500)
        return encode_response(None if empty_result else result)
