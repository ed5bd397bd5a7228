from __future__ import annotations

import logging
import typing as tp

import httpx

from .._config import Config
from .._exceptions import CacheUnavailable, NetworkUnavailable, NonSuccessStatus, StoreIOFailure
from .._models import CachedResponse, request_identity, synthesize_response
from .._routing import RequestClass
from .._synchronization import AsyncBackgroundTasks
from ._eviction import enforce_bound
from ._network import AsyncNetwork
from ._storages import AsyncBaseStorage

logger = logging.getLogger("cachewarden.strategies")

__all__ = (
    "AsyncBaseStrategy",
    "AsyncCacheFirst",
    "AsyncNetworkFirst",
    "AsyncStaleWhileRevalidate",
)


class AsyncBaseStrategy:
    """
    Base class for the fetch/cache algorithms.

    A strategy always returns a response: either a real one, from the network or a
    store, or a synthesized plain-text placeholder. It never raises to the caller.
    """

    request_class: tp.ClassVar[RequestClass]

    def __init__(self, storage: AsyncBaseStorage, network: AsyncNetwork, config: Config) -> None:
        self._storage = storage
        self._network = network
        self._config = config

    async def handle(self, request: httpx.Request) -> httpx.Response:
        raise NotImplementedError()

    def _lookup_names(self) -> tp.Tuple[str, ...]:
        names = self._config.store_names
        if self._config.match_all_stores:
            return names.allow_list
        return (names.dynamic,)

    async def _match(self, identity: str, names: tp.Sequence[str]) -> tp.Optional[CachedResponse]:
        try:
            return await self._storage.match(identity, names)
        except StoreIOFailure as exc:
            raise CacheUnavailable(f"Lookup of {identity} failed: {exc}") from exc

    async def _match_or_miss(self, identity: str, names: tp.Sequence[str]) -> tp.Optional[CachedResponse]:
        try:
            return await self._match(identity, names)
        except CacheUnavailable as exc:
            logger.error("Treating %s as a cache miss: %s", identity, exc)
            return None

    async def _store(self, name: str, identity: str, response: CachedResponse) -> None:
        try:
            store = await self._storage.open(name)
            await store.put(identity, response)
        except StoreIOFailure as exc:
            logger.error("Could not store %s in %r: %s", identity, name, exc)
            return

        bound = self._config.bound_for(name)
        if bound is not None:
            await enforce_bound(store, bound)

    def _from_cache(self, cached: CachedResponse) -> httpx.Response:
        return cached.to_httpx(from_cache=True, synthesized=False, request_class=self.request_class.value)

    def _from_network(self, response: CachedResponse) -> httpx.Response:
        return response.to_httpx(from_cache=False, synthesized=False, request_class=self.request_class.value)

    def _synthesize(self, status_code: int, text: str) -> httpx.Response:
        return synthesize_response(status_code, text, request_class=self.request_class.value)


class AsyncCacheFirst(AsyncBaseStrategy):
    """
    Serves stored responses without touching the network; populates the dynamic store on a miss.
    """

    request_class = RequestClass.STATIC_ASSET

    async def handle(self, request: httpx.Request) -> httpx.Response:
        identity = request_identity(request)

        cached = await self._match_or_miss(identity, self._lookup_names())
        if cached is not None:
            return self._from_cache(cached)

        try:
            response = await self._network.fetch(request)
            if not response.is_success:
                raise NonSuccessStatus(response)
        except (NetworkUnavailable, NonSuccessStatus) as exc:
            logger.error("Cache-first fetch failed: %s", exc)
            return self._synthesize(408, "Network error occurred")

        await self._store(self._config.store_names.dynamic, identity, response)
        return self._from_network(response)


class AsyncNetworkFirst(AsyncBaseStrategy):
    """
    Prefers a fresh network response; falls back to the stores when the network lets us down.
    """

    request_class = RequestClass.OTHER

    async def handle(self, request: httpx.Request) -> httpx.Response:
        identity = request_identity(request)

        try:
            response = await self._network.fetch(request)
        except NetworkUnavailable as exc:
            try:
                cached = await self._match(identity, self._lookup_names())
            except CacheUnavailable as cache_exc:
                logger.error("Both network and cache failed for %s: %s; %s", identity, exc, cache_exc)
                return self._synthesize(500, "Both network and cache failed")
            if cached is None:
                logger.error("Both network and cache failed for %s: %s", identity, exc)
                return self._synthesize(500, "Both network and cache failed")
            logger.debug("Network failed for %s, serving from cache: %s", identity, exc)
            return self._from_cache(cached)

        if response.is_success:
            await self._store(self._config.store_names.dynamic, identity, response)
            return self._from_network(response)

        logger.info("Falling back to cache: %s", NonSuccessStatus(response))
        cached = await self._match_or_miss(identity, self._lookup_names())
        if cached is not None:
            return self._from_cache(cached)
        return self._from_network(response)


class AsyncStaleWhileRevalidate(AsyncBaseStrategy):
    """
    Answers from the api store straight away and refreshes it in the background.

    :param background: Task runner the refresh is scheduled on when a stored response exists
    :type background: AsyncBackgroundTasks
    """

    request_class = RequestClass.API_CALL

    def __init__(
        self,
        storage: AsyncBaseStorage,
        network: AsyncNetwork,
        config: Config,
        background: AsyncBackgroundTasks,
    ) -> None:
        super().__init__(storage, network, config)
        self._background = background

    async def handle(self, request: httpx.Request) -> httpx.Response:
        identity = request_identity(request)

        cached = await self._match_or_miss(identity, (self._config.store_names.api,))
        if cached is not None:
            self._background.start_soon(self._refresh_in_background, request, identity)
            return self._from_cache(cached)

        try:
            response = await self._refresh(request, identity)
        except NetworkUnavailable as exc:
            logger.error("API request failed: %s", exc)
            return self._synthesize(400, "API request failed")
        return self._from_network(response)

    async def _refresh(self, request: httpx.Request, identity: str) -> CachedResponse:
        response = await self._network.fetch(request)
        if response.is_success:
            await self._store(self._config.store_names.api, identity, response)
        else:
            logger.warning("Not storing %s: %s", identity, NonSuccessStatus(response))
        return response

    async def _refresh_in_background(self, request: httpx.Request, identity: str) -> None:
        try:
            await self._refresh(request, identity)
        except NetworkUnavailable as exc:
            logger.warning("Background refresh failed for %s: %s", identity, exc)
