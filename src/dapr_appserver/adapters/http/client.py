"""Outbound sidecar client over HTTP, using an aiohttp session."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import aiohttp
from aiohttp import ClientSession, TCPConnector

from dapr_appserver.adapters import codec
from dapr_appserver.config import ClientOptions
from dapr_appserver.errors import SidecarRequestError
from dapr_appserver.interfaces.client import DaprClient, StateOperation
from dapr_appserver.interfaces.invoker import HttpMethod

logger = logging.getLogger(__name__)

API_VERSION = "v1.0"


class HttpDaprClient(DaprClient):
    """Calls the sidecar's HTTP API.

    The session is opened lazily on the first request, inside the running
    event loop. With `is_keep_alive` disabled every request uses a fresh
    connection.
    """

    def __init__(
        self, host: str, port: str, options: ClientOptions | None = None
    ) -> None:
        self.host = host
        self.port = port
        self.options = options or ClientOptions()
        self.base_url = f"http://{host}:{port}/{API_VERSION}"
        self._session: ClientSession | None = None

    async def _ensure_session(self) -> ClientSession:
        if self._session is None or self._session.closed:
            connector = TCPConnector(force_close=not self.options.is_keep_alive)
            self._session = ClientSession(connector=connector)
            logger.debug(
                "Opened sidecar session to %s (keep-alive=%s)",
                self.base_url,
                self.options.is_keep_alive,
            )
        return self._session

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        payload: Any = None,
    ) -> Any:
        session = await self._ensure_session()
        url = f"{self.base_url}{path}"
        headers = {"Content-Type": "application/json"} if payload is not None else {}
        try:
            async with session.request(
                method, url, data=codec.encode(payload), headers=headers
            ) as response:
                raw = await response.read()
                if response.status >= 400:
                    detail = raw.decode("utf-8", errors="replace") or str(
                        response.reason
                    )
                    raise SidecarRequestError(operation, detail, response.status)
                return codec.decode(raw)
        except aiohttp.ClientError as exc:
            raise SidecarRequestError(operation, str(exc)) from exc

    # --- DaprClient ---

    async def publish(self, pubsub_name: str, topic: str, data: Any) -> None:
        await self._request("publish", "POST", f"/publish/{pubsub_name}/{topic}", data)

    async def invoke(
        self,
        app_id: str,
        method_name: str,
        data: Any = None,
        http_method: HttpMethod = HttpMethod.POST,
    ) -> Any:
        return await self._request(
            "invoke",
            HttpMethod(http_method).value,
            f"/invoke/{app_id}/method/{method_name}",
            data,
        )

    async def send_binding(
        self,
        binding_name: str,
        operation: str,
        data: Any = None,
        metadata: Mapping[str, str] | None = None,
    ) -> Any:
        payload = {
            "operation": operation,
            "data": data,
            "metadata": dict(metadata or {}),
        }
        return await self._request(
            "send_binding", "POST", f"/bindings/{binding_name}", payload
        )

    async def get_actor_state(self, actor_type: str, actor_id: str, key: str) -> Any:
        return await self._request(
            "get_actor_state", "GET", f"/actors/{actor_type}/{actor_id}/state/{key}"
        )

    async def execute_actor_state_transaction(
        self, actor_type: str, actor_id: str, operations: Sequence[StateOperation]
    ) -> None:
        await self._request(
            "execute_actor_state_transaction",
            "POST",
            f"/actors/{actor_type}/{actor_id}/state",
            [op.to_dict() for op in operations],
        )

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
            logger.debug("Closed sidecar session to %s", self.base_url)
        self._session = None
