from __future__ import annotations

import logging
import types
import typing as tp

import httpx

from .._config import Config
from .._routing import RequestClass, classify
from .._synchronization import AsyncBackgroundTasks
from ._network import AsyncNetwork
from ._storages import AsyncBaseStorage
from ._strategies import AsyncBaseStrategy, AsyncCacheFirst, AsyncNetworkFirst, AsyncStaleWhileRevalidate

if tp.TYPE_CHECKING:  # pragma: no cover
    from typing_extensions import Self

logger = logging.getLogger("cachewarden.router")

__all__ = ("AsyncRouter",)


class AsyncRouter:
    """
    Classifies intercepted requests and hands each one to its strategy.

    The router must be entered before dispatching: it owns the task group that
    background refreshes run on, and leaving it waits for those to finish.

    :param storage: Storage holding every named store
    :type storage: AsyncBaseStorage
    :param network: The real network
    :type network: AsyncNetwork
    :param config: Settings of the current generation
    :type config: Config
    """

    def __init__(self, storage: AsyncBaseStorage, network: AsyncNetwork, config: Config) -> None:
        self._network = network
        self._config = config
        self._background = AsyncBackgroundTasks()
        self._strategies: tp.Dict[RequestClass, AsyncBaseStrategy] = {
            RequestClass.STATIC_ASSET: AsyncCacheFirst(storage, network, config),
            RequestClass.API_CALL: AsyncStaleWhileRevalidate(storage, network, config, self._background),
            RequestClass.OTHER: AsyncNetworkFirst(storage, network, config),
        }

    @property
    def running(self) -> bool:
        return self._background.running

    async def dispatch(self, request: httpx.Request) -> httpx.Response:
        """
        Serves one request.

        Requests that are not intercepted go straight to the network and any
        transport error they raise propagates. Intercepted requests always get a
        response.

        :param request: An HTTP request
        :type request: httpx.Request
        :return: An HTTP response
        :rtype: httpx.Response
        """
        if not self.running:
            raise RuntimeError(f"`{type(self).__name__}` must be entered before dispatching requests.")

        request_class = classify(request, self._config)
        if request_class is None:
            logger.debug("Passing %s %s through", request.method, request.url)
            return await self._network.send(request)

        logger.debug("Routing %s to %s", request.url, request_class.value)
        return await self._strategies[request_class].handle(request)

    async def __aenter__(self) -> Self:
        await self._background.__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: tp.Optional[tp.Type[BaseException]] = None,
        exc_value: tp.Optional[BaseException] = None,
        traceback: tp.Optional[types.TracebackType] = None,
    ) -> None:
        await self._background.__aexit__(exc_type, exc_value, traceback)
