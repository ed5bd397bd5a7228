from ._client import AsyncOfflineClient as AsyncOfflineClient
from ._eviction import enforce_bound as enforce_bound
from ._lifecycle import (
    AsyncLifecycle as AsyncLifecycle,
    InstallReport as InstallReport,
    LifecycleState as LifecycleState,
)
from ._mock import MockAsyncTransport as MockAsyncTransport
from ._network import AsyncNetwork as AsyncNetwork
from ._router import AsyncRouter as AsyncRouter
from ._storages import (
    AsyncBaseStorage as AsyncBaseStorage,
    AsyncInMemoryStorage as AsyncInMemoryStorage,
    AsyncSQLiteStorage as AsyncSQLiteStorage,
    AsyncStore as AsyncStore,
)
from ._strategies import (
    AsyncBaseStrategy as AsyncBaseStrategy,
    AsyncCacheFirst as AsyncCacheFirst,
    AsyncNetworkFirst as AsyncNetworkFirst,
    AsyncStaleWhileRevalidate as AsyncStaleWhileRevalidate,
)
from ._transports import AsyncOfflineTransport as AsyncOfflineTransport
