import typing as tp

import httpx

from .._config import Config
from ._lifecycle import InstallReport
from ._storages import AsyncBaseStorage
from ._transports import AsyncOfflineTransport

__all__ = ("AsyncOfflineClient",)


class AsyncOfflineClient(httpx.AsyncClient):
    def __init__(
        self,
        *args: tp.Any,
        storage: tp.Optional[AsyncBaseStorage] = None,
        config: tp.Optional[Config] = None,
        **kwargs: tp.Any,
    ):
        self._storage = storage
        self._config = config
        super().__init__(*args, **kwargs)

    def _init_transport(self, *args, **kwargs) -> AsyncOfflineTransport:  # type: ignore
        _transport = super()._init_transport(*args, **kwargs)
        config = self._config
        if config is None:
            if not str(self.base_url):
                raise ValueError("`AsyncOfflineClient` needs either a `config` or a `base_url` to know its origin.")
            config = Config(origin=str(self.base_url))
        return AsyncOfflineTransport(
            transport=_transport,
            config=config,
            storage=self._storage,
        )

    @property
    def offline_transport(self) -> AsyncOfflineTransport:
        return tp.cast(AsyncOfflineTransport, self._transport)

    async def install(self) -> InstallReport:
        return await self.offline_transport.install()

    async def activate(self) -> tp.List[str]:
        return await self.offline_transport.activate()

    async def start(self) -> InstallReport:
        return await self.offline_transport.start()
