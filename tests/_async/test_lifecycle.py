import httpx
import pytest

from cachewarden import (
    AsyncInMemoryStorage,
    AsyncLifecycle,
    AsyncNetwork,
    CachedResponse,
    Config,
    LifecycleError,
    LifecycleState,
    MockAsyncTransport,
    StoreIOFailure,
    StoreNames,
)

ORIGIN = "https://app.example.com"


class PathTransport(MockAsyncTransport):
    def __init__(self, outcomes) -> None:
        super().__init__()
        self.outcomes = outcomes

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.outcomes[request.url.path]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FailingNamesStorage(AsyncInMemoryStorage):
    async def names(self):
        raise StoreIOFailure("disk is gone")


class FailingCreateStorage(AsyncInMemoryStorage):
    async def create(self, name):
        raise StoreIOFailure("disk is gone")


def make_response(url: str) -> CachedResponse:
    return CachedResponse(url=url, status_code=200, content=b"old")


@pytest.mark.anyio
async def test_install_tolerates_partial_failure(config):
    storage = AsyncInMemoryStorage()
    transport = PathTransport(
        {
            "/": httpx.Response(200, content=b"root"),
            "/index.html": httpx.Response(200, content=b"index"),
            "/manifest.json": httpx.ConnectError("offline"),
            "/logo.png": httpx.Response(200, content=b"png"),
        }
    )
    lifecycle = AsyncLifecycle(storage, AsyncNetwork(transport), config)

    report = await lifecycle.install()

    assert lifecycle.state is LifecycleState.INSTALLED
    assert report.cached == ["/", "/index.html", "/logo.png"]
    assert report.failed == ["/manifest.json"]

    static = await storage.open("static")
    assert sorted(await static.keys()) == sorted(
        [ORIGIN + "/", ORIGIN + "/index.html", ORIGIN + "/logo.png"]
    )
    entry = await static.get(ORIGIN + "/index.html")
    assert entry is not None and entry.content == b"index"


@pytest.mark.anyio
async def test_install_skips_non_success_entries(config):
    storage = AsyncInMemoryStorage()
    transport = PathTransport(
        {
            "/": httpx.Response(200, content=b"root"),
            "/index.html": httpx.Response(200, content=b"index"),
            "/manifest.json": httpx.Response(200, content=b"{}"),
            "/logo.png": httpx.Response(404),
        }
    )
    lifecycle = AsyncLifecycle(storage, AsyncNetwork(transport), config)

    report = await lifecycle.install()

    assert report.failed == ["/logo.png"]
    static = await storage.open("static")
    assert ORIGIN + "/logo.png" not in await static.keys()
    assert len(transport.requests) == 4


@pytest.mark.anyio
async def test_install_reaches_installed_when_store_cannot_be_opened(config):
    transport = PathTransport({})
    lifecycle = AsyncLifecycle(FailingCreateStorage(), AsyncNetwork(transport), config)

    report = await lifecycle.install()

    assert lifecycle.state is LifecycleState.INSTALLED
    assert report.cached == []
    assert report.failed == list(config.static_manifest)
    assert transport.requests == []


@pytest.mark.anyio
async def test_activation_removes_stores_outside_allow_list(config):
    storage = AsyncInMemoryStorage()
    for name in ("static", "dynamic", "api", "legacy-v0"):
        store = await storage.open(name)
        await store.put(ORIGIN + "/", make_response(ORIGIN + "/"))

    transport = PathTransport({path: httpx.Response(200) for path in config.static_manifest})
    lifecycle = AsyncLifecycle(storage, AsyncNetwork(transport), config)
    await lifecycle.install()

    deleted = await lifecycle.activate()

    assert deleted == ["legacy-v0"]
    assert lifecycle.state is LifecycleState.ACTIVE
    assert await storage.names() == ["static", "dynamic", "api"]
    dynamic = await storage.open("dynamic")
    assert await dynamic.keys() == [ORIGIN + "/"]


@pytest.mark.anyio
async def test_activation_uses_configured_store_names():
    config = Config(
        origin=ORIGIN,
        static_manifest=("/",),
        store_names=StoreNames(static="static-cache-v2", dynamic="dynamic-cache-v2", api="api-cache-v2"),
    )
    storage = AsyncInMemoryStorage()
    for name in ("static-cache-v1", "dynamic-cache-v1", "api-cache-v1", "api-cache-v2"):
        await storage.open(name)

    lifecycle = AsyncLifecycle(storage, AsyncNetwork(PathTransport({"/": httpx.Response(200)})), config)
    await lifecycle.install()
    deleted = await lifecycle.activate()

    assert deleted == ["static-cache-v1", "dynamic-cache-v1", "api-cache-v1"]
    assert sorted(await storage.names()) == ["api-cache-v2", "static-cache-v2"]


@pytest.mark.anyio
async def test_activation_survives_store_listing_failure(config):
    transport = PathTransport({path: httpx.Response(200) for path in config.static_manifest})
    lifecycle = AsyncLifecycle(FailingNamesStorage(), AsyncNetwork(transport), config)
    await lifecycle.install()

    assert await lifecycle.activate() == []
    assert lifecycle.state is LifecycleState.ACTIVE


@pytest.mark.anyio
async def test_lifecycle_transitions_are_ordered(config):
    transport = PathTransport({path: httpx.Response(200) for path in config.static_manifest})
    lifecycle = AsyncLifecycle(AsyncInMemoryStorage(), AsyncNetwork(transport), config)

    assert lifecycle.state is LifecycleState.IDLE
    with pytest.raises(LifecycleError):
        await lifecycle.activate()

    await lifecycle.install()
    with pytest.raises(LifecycleError):
        await lifecycle.install()

    await lifecycle.activate()
    with pytest.raises(LifecycleError):
        await lifecycle.activate()


@pytest.mark.anyio
async def test_install_and_activate_scenario():
    config = Config(origin=ORIGIN, static_manifest=("/", "/a.json"))
    storage = AsyncInMemoryStorage()
    await storage.open("old-cache-v1")
    transport = PathTransport(
        {
            "/": httpx.Response(200, content=b"root"),
            "/a.json": httpx.ConnectError("offline"),
        }
    )
    lifecycle = AsyncLifecycle(storage, AsyncNetwork(transport), config)

    await lifecycle.install()
    static = await storage.open("static")
    assert await static.keys() == [ORIGIN + "/"]

    deleted = await lifecycle.activate()
    assert deleted == ["old-cache-v1"]
    assert "old-cache-v1" not in await storage.names()
