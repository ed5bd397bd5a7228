from ._async import (
    AsyncBaseStorage as AsyncBaseStorage,
    AsyncBaseStrategy as AsyncBaseStrategy,
    AsyncCacheFirst as AsyncCacheFirst,
    AsyncInMemoryStorage as AsyncInMemoryStorage,
    AsyncLifecycle as AsyncLifecycle,
    AsyncNetwork as AsyncNetwork,
    AsyncNetworkFirst as AsyncNetworkFirst,
    AsyncOfflineClient as AsyncOfflineClient,
    AsyncOfflineTransport as AsyncOfflineTransport,
    AsyncRouter as AsyncRouter,
    AsyncSQLiteStorage as AsyncSQLiteStorage,
    AsyncStaleWhileRevalidate as AsyncStaleWhileRevalidate,
    AsyncStore as AsyncStore,
    InstallReport as InstallReport,
    LifecycleState as LifecycleState,
    MockAsyncTransport as MockAsyncTransport,
    enforce_bound as enforce_bound,
)
from ._config import (
    DEFAULT_MAX_DYNAMIC_ENTRIES as DEFAULT_MAX_DYNAMIC_ENTRIES,
    DEFAULT_STATIC_MANIFEST as DEFAULT_STATIC_MANIFEST,
    Config as Config,
    StoreNames as StoreNames,
)
from ._exceptions import (
    CacheUnavailable as CacheUnavailable,
    CacheWardenError as CacheWardenError,
    LifecycleError as LifecycleError,
    ManifestFetchFailure as ManifestFetchFailure,
    NetworkUnavailable as NetworkUnavailable,
    NonSuccessStatus as NonSuccessStatus,
    StoreIOFailure as StoreIOFailure,
)
from ._models import (
    CachedResponse as CachedResponse,
    request_identity as request_identity,
    synthesize_response as synthesize_response,
)
from ._routing import RequestClass as RequestClass, classify as classify
from ._serializers import (
    BaseSerializer as BaseSerializer,
    JSONSerializer as JSONSerializer,
    PickleSerializer as PickleSerializer,
    YAMLSerializer as YAMLSerializer,
)

__all__ = (
    # Transport & client
    "AsyncOfflineTransport",
    "AsyncOfflineClient",
    "MockAsyncTransport",
    # Orchestration
    "AsyncLifecycle",
    "LifecycleState",
    "InstallReport",
    "AsyncRouter",
    "RequestClass",
    "classify",
    "AsyncNetwork",
    ## Strategies
    "AsyncBaseStrategy",
    "AsyncCacheFirst",
    "AsyncNetworkFirst",
    "AsyncStaleWhileRevalidate",
    ## Eviction
    "enforce_bound",
    # Storages
    "AsyncStore",
    "AsyncBaseStorage",
    "AsyncInMemoryStorage",
    "AsyncSQLiteStorage",
    # Serializers
    "BaseSerializer",
    "JSONSerializer",
    "PickleSerializer",
    "YAMLSerializer",
    # Models
    "CachedResponse",
    "request_identity",
    "synthesize_response",
    # Config
    "Config",
    "StoreNames",
    "DEFAULT_STATIC_MANIFEST",
    "DEFAULT_MAX_DYNAMIC_ENTRIES",
    # Exceptions
    "CacheWardenError",
    "NetworkUnavailable",
    "NonSuccessStatus",
    "StoreIOFailure",
    "CacheUnavailable",
    "ManifestFetchFailure",
    "LifecycleError",
)

__version__ = "0.1.0"
