"""
HTTP transport to the backend.

Thin wrapper around an aiohttp ClientSession exposing the three primitives the
datasource needs. It does no retries and sets no timeouts of its own: failures
are reported and raised as FetchError, unchanged.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

import aiohttp
from aiohttp import ClientResponse, ClientSession

from .exceptions import handle_exception
from .version import get_app_version

logger = logging.getLogger(__name__)


@dataclass
class FetchResponse:
    status: int
    data: Any
    headers: dict[str, str] = field(default_factory=dict)


class Transport(Protocol):
    async def datasource_request(
        self,
        url: str,
        method: str = "GET",
        data: Any = None,
        request_id: str | None = None,
    ) -> FetchResponse: ...

    async def get(self, url: str, params: dict | None = None) -> Any: ...

    async def post(self, url: str, body: Any = None) -> Any: ...


async def read_body(res: ClientResponse) -> Any:
    """Decode a response body as JSON, falling back to text when it isn't."""
    try:
        return await res.json(content_type=None)
    except ValueError:
        return await res.text(errors="replace")


class BackendTransport:
    """Sends requests to the backend and keeps track of in-flight requests by request id."""

    def __init__(self, session: ClientSession, base_url: str):
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.headers = {"User-Agent": f"datasource-backend/{get_app_version()}"}
        self._in_flight: dict[str, asyncio.Task] = {}

    async def _fetch(
        self,
        method: str,
        url: str,
        data: Any = None,
        params: dict | None = None,
        request_id: str | None = None,
    ) -> FetchResponse:
        try:
            async with self.session.request(
                method,
                f"{self.base_url}{url}",
                json=data,
                params=params,
                headers=self.headers,
            ) as res:
                body = await read_body(res)
                if not res.ok:
                    handle_exception(res.status, res.reason or "", body, url, request_id)
                return FetchResponse(res.status, body, dict(res.headers))
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("Request to %s failed: %r", url, e)
            handle_exception(0, str(e) or e.__class__.__name__, None, url, request_id)

    async def datasource_request(
        self,
        url: str,
        method: str = "GET",
        data: Any = None,
        request_id: str | None = None,
        params: dict | None = None,
    ) -> FetchResponse:
        """
        Send a request to the backend.

        A request carrying the same request id as one still in flight cancels
        the older one, whose awaiter gets asyncio.CancelledError.

        Raises:
            FetchError: If the backend answers with an error status or can't be reached
        """
        if request_id is None:
            return await self._fetch(method, url, data, params)

        self.cancel_request(request_id)
        task = asyncio.ensure_future(self._fetch(method, url, data, params, request_id))
        self._in_flight[request_id] = task
        try:
            return await task
        finally:
            if self._in_flight.get(request_id) is task:
                del self._in_flight[request_id]

    def cancel_request(self, request_id: str) -> bool:
        task = self._in_flight.pop(request_id, None)
        if task is None or task.done():
            return False
        logger.debug("Cancelling request %s", request_id)
        return task.cancel()

    async def get(self, url: str, params: dict | None = None) -> Any:
        res = await self.datasource_request(url, "GET", params=params)
        return res.data

    async def post(self, url: str, body: Any = None) -> Any:
        res = await self.datasource_request(url, "POST", data=body)
        return res.data
