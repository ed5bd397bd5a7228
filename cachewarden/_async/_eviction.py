from __future__ import annotations

import logging

from .._exceptions import StoreIOFailure
from ._storages import AsyncStore

logger = logging.getLogger("cachewarden.eviction")

__all__ = ("enforce_bound",)


async def enforce_bound(store: AsyncStore, max_entries: int) -> int:
    """
    Evicts the oldest entries of a store until it holds at most `max_entries`.

    The key list is read again after every deletion, so a store that overshoots its
    bound by several entries is brought back within it in one call. Store failures
    are logged and never raised.

    :param store: The store to trim
    :type store: AsyncStore
    :param max_entries: The maximum number of entries the store may keep
    :type max_entries: int
    :return: How many entries were evicted
    :rtype: int
    """
    evicted = 0
    try:
        keys = await store.keys()
        while len(keys) > max_entries:
            await store.delete(keys[0])
            evicted += 1
            keys = await store.keys()
    except StoreIOFailure as exc:
        logger.error("Error limiting size of store %r: %s", store.name, exc)
    if evicted:
        logger.debug("Evicted %d entries from store %r", evicted, store.name)
    return evicted
