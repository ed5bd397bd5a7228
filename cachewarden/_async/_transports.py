from __future__ import annotations

import types
import typing as tp

import httpx

from .._config import Config
from .._exceptions import LifecycleError
from ._lifecycle import AsyncLifecycle, InstallReport, LifecycleState
from ._network import AsyncNetwork
from ._router import AsyncRouter
from ._storages import AsyncBaseStorage, AsyncSQLiteStorage

if tp.TYPE_CHECKING:  # pragma: no cover
    from typing_extensions import Self

__all__ = ("AsyncOfflineTransport",)


class AsyncOfflineTransport(httpx.AsyncBaseTransport):
    """
    An HTTPX Transport that intercepts same-origin requests and serves them from named stores.

    Until the lifecycle is active every request goes straight to the wrapped transport.
    The transport must be opened (`async with`) for background refreshes to run.

    :param transport: `Transport` that our class wraps in order to add the caching layer on top of
    :type transport: httpx.AsyncBaseTransport
    :param config: Routing and storage settings of the current generation
    :type config: Config
    :param storage: Storage holding the named stores, defaults to None
    :type storage: tp.Optional[AsyncBaseStorage], optional
    """

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport,
        config: Config,
        storage: tp.Optional[AsyncBaseStorage] = None,
    ) -> None:
        self._transport = transport
        self._config = config

        self._storage = storage if storage is not None else AsyncSQLiteStorage()

        if not isinstance(self._storage, AsyncBaseStorage):  # pragma: no cover
            raise TypeError(f"Expected subclass of `AsyncBaseStorage` but got `{storage.__class__.__name__}`")

        network = AsyncNetwork(transport)
        self._lifecycle = AsyncLifecycle(self._storage, network, config)
        self._router = AsyncRouter(self._storage, network, config)

    @property
    def lifecycle(self) -> AsyncLifecycle:
        return self._lifecycle

    @property
    def storage(self) -> AsyncBaseStorage:
        return self._storage

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        """
        Serves the request through the router once active, or passes it through.

        :param request: An HTTP request
        :type request: httpx.Request
        :return: An HTTP response
        :rtype: httpx.Response
        """
        if self._lifecycle.state is not LifecycleState.ACTIVE:
            return await self._transport.handle_async_request(request)
        return await self._router.dispatch(request)

    async def install(self) -> InstallReport:
        return await self._lifecycle.install()

    async def activate(self) -> tp.List[str]:
        if not self._router.running:
            raise LifecycleError(f"`{type(self).__name__}` must be opened with `async with` before activation.")
        return await self._lifecycle.activate()

    async def start(self) -> InstallReport:
        """Installs and immediately activates the current generation."""
        report = await self.install()
        await self.activate()
        return report

    async def aclose(self) -> None:
        await self._storage.aclose()
        await self._transport.aclose()

    async def __aenter__(self) -> Self:
        await self._router.__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: tp.Optional[tp.Type[BaseException]] = None,
        exc_value: tp.Optional[BaseException] = None,
        traceback: tp.Optional[types.TracebackType] = None,
    ) -> None:
        try:
            await self._router.__aexit__(exc_type, exc_value, traceback)
        finally:
            await self.aclose()
