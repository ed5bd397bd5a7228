from __future__ import annotations

import typing as tp

import httpx

from .._exceptions import NetworkUnavailable
from .._models import CachedResponse

__all__ = ("AsyncNetwork",)


class AsyncNetwork:
    """
    The real network, as seen by the strategies.

    :param transport: `Transport` that performs the actual HTTP exchange
    :type transport: httpx.AsyncBaseTransport
    """

    def __init__(self, transport: httpx.AsyncBaseTransport) -> None:
        self._transport = transport

    async def send(self, request: httpx.Request) -> httpx.Response:
        """Sends the request untouched; errors propagate as raised by the transport."""
        return await self._transport.handle_async_request(request)

    async def fetch(self, request: httpx.Request) -> CachedResponse:
        """
        Sends the request and buffers the whole raw response.

        :param request: An HTTP request
        :type request: httpx.Request
        :raises NetworkUnavailable: When the transport could not complete the exchange
        :return: The response, detached from the connection
        :rtype: CachedResponse
        """
        try:
            response = await self._transport.handle_async_request(request)
            assert isinstance(response.stream, tp.AsyncIterable)
            try:
                content = b"".join([chunk async for chunk in response.stream])
            finally:
                await response.aclose()
        except httpx.TransportError as exc:
            raise NetworkUnavailable(f"{request.method} {request.url} failed: {exc!r}") from exc
        return CachedResponse.from_httpx(request, response, content)

    async def aclose(self) -> None:
        await self._transport.aclose()
