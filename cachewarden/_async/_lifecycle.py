from __future__ import annotations

import enum
import logging
import typing as tp
from dataclasses import dataclass, field

import anyio
import httpx

from .._config import Config
from .._exceptions import LifecycleError, ManifestFetchFailure, NetworkUnavailable, StoreIOFailure
from .._models import request_identity
from .._utils import partition
from ._network import AsyncNetwork
from ._storages import AsyncBaseStorage, AsyncStore

logger = logging.getLogger("cachewarden.lifecycle")

__all__ = ("AsyncLifecycle", "LifecycleState", "InstallReport")


class LifecycleState(enum.Enum):
    IDLE = "idle"
    INSTALLING = "installing"
    INSTALLED = "installed"
    ACTIVATING = "activating"
    ACTIVE = "active"


@dataclass
class InstallReport:
    cached: tp.List[str] = field(default_factory=list)
    failed: tp.List[str] = field(default_factory=list)


class AsyncLifecycle:
    """
    Drives one deployment generation from install to activation.

    Install seeds the static store from the manifest on a best-effort basis;
    activation garbage-collects every store that does not belong to the generation.
    Both transitions are triggered from outside.

    :param storage: Storage holding every named store
    :type storage: AsyncBaseStorage
    :param network: Network used to fetch the manifest
    :type network: AsyncNetwork
    :param config: Settings of the current generation
    :type config: Config
    """

    def __init__(self, storage: AsyncBaseStorage, network: AsyncNetwork, config: Config) -> None:
        self._storage = storage
        self._network = network
        self._config = config
        self.state = LifecycleState.IDLE

    def _transition(self, expected: LifecycleState, new: LifecycleState) -> None:
        if self.state is not expected:
            raise LifecycleError(
                f"Cannot move to `{new.value}` while `{self.state.value}`, expected `{expected.value}`"
            )
        logger.debug("Lifecycle %s -> %s", self.state.value, new.value)
        self.state = new

    async def install(self) -> InstallReport:
        """
        Pre-populates the static store with every manifest entry that can be fetched.

        A failing entry is logged and skipped; the lifecycle reaches `installed`
        regardless of how many entries made it.

        :raises LifecycleError: When called in any state other than `idle`
        :return: Which manifest paths were cached and which failed
        :rtype: InstallReport
        """
        self._transition(LifecycleState.IDLE, LifecycleState.INSTALLING)
        logger.info("Installing, precaching %d assets", len(self._config.static_manifest))

        report = InstallReport()
        try:
            store = await self._storage.open(self._config.store_names.static)
        except StoreIOFailure as exc:
            logger.error("Failed to open store %r: %s", self._config.store_names.static, exc)
            report.failed.extend(self._config.static_manifest)
        else:
            outcomes: tp.Dict[str, bool] = {}
            async with anyio.create_task_group() as task_group:
                for path in self._config.static_manifest:
                    task_group.start_soon(self._precache, store, path, outcomes)
            report.cached, report.failed = partition(self._config.static_manifest, lambda path: outcomes[path])

        self._transition(LifecycleState.INSTALLING, LifecycleState.INSTALLED)
        return report

    async def _precache(self, store: AsyncStore, path: str, outcomes: tp.Dict[str, bool]) -> None:
        request = httpx.Request("GET", self._config.resolve(path))
        try:
            try:
                response = await self._network.fetch(request)
            except NetworkUnavailable as exc:
                raise ManifestFetchFailure(path, str(exc)) from exc
            if not response.is_success:
                raise ManifestFetchFailure(path, f"status {response.status_code}")
            await store.put(request_identity(request), response)
        except (ManifestFetchFailure, StoreIOFailure) as exc:
            logger.warning("Failed to cache %s: %s", path, exc)
            outcomes[path] = False
        else:
            outcomes[path] = True

    async def activate(self) -> tp.List[str]:
        """
        Deletes every store outside the generation allow-list and starts interception.

        :raises LifecycleError: When called in any state other than `installed`
        :return: Names of the deleted stores
        :rtype: tp.List[str]
        """
        self._transition(LifecycleState.INSTALLED, LifecycleState.ACTIVATING)
        allow_list = self._config.store_names.allow_list

        deleted: tp.List[str] = []
        try:
            names = await self._storage.names()
        except StoreIOFailure as exc:
            logger.error("Could not list stores, skipping cleanup: %s", exc)
            names = []

        _, stale = partition(names, lambda name: name in allow_list)
        for name in stale:
            logger.info("Removing old store %r", name)
            try:
                await self._storage.delete(name)
            except StoreIOFailure as exc:
                logger.error("Could not remove store %r: %s", name, exc)
            else:
                deleted.append(name)

        self._transition(LifecycleState.ACTIVATING, LifecycleState.ACTIVE)
        return deleted
