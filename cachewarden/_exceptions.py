from __future__ import annotations

import typing as tp

if tp.TYPE_CHECKING:  # pragma: no cover
    from ._models import CachedResponse

__all__ = (
    "CacheWardenError",
    "NetworkUnavailable",
    "NonSuccessStatus",
    "StoreIOFailure",
    "CacheUnavailable",
    "ManifestFetchFailure",
    "LifecycleError",
)


class CacheWardenError(Exception): ...


class NetworkUnavailable(CacheWardenError): ...


class NonSuccessStatus(CacheWardenError):
    def __init__(self, response: CachedResponse) -> None:
        super().__init__(f"{response.url} responded with {response.status_code}")
        self.response = response


class StoreIOFailure(CacheWardenError): ...


class CacheUnavailable(StoreIOFailure): ...


class ManifestFetchFailure(CacheWardenError):
    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url


class LifecycleError(CacheWardenError): ...
