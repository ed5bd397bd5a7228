import httpx
import pytest

import cachewarden

ORIGIN = "https://app.example.com"


@pytest.mark.anyio
async def test_client_serves_cache_first_assets_offline(config):
    transport = cachewarden.MockAsyncTransport()
    transport.add_responses([httpx.Response(200, content=path.encode()) for path in config.static_manifest])

    async with cachewarden.AsyncOfflineClient(
        transport=transport, config=config, storage=cachewarden.AsyncInMemoryStorage()
    ) as client:
        await client.start()

        transport.add_responses([httpx.Response(200, text="<html>app</html>")])
        first = await client.get(ORIGIN + "/")
        second = await client.get(ORIGIN + "/")

        assert first.text == second.text == "<html>app</html>"
        assert not first.extensions["from_cache"]
        assert second.extensions["from_cache"]


@pytest.mark.anyio
async def test_client_decodes_stored_content_encoding(config):
    import gzip

    body = gzip.compress(b'{"items": []}')
    transport = cachewarden.MockAsyncTransport()
    transport.add_responses([httpx.Response(200) for _ in config.static_manifest])

    async with cachewarden.AsyncOfflineClient(
        transport=transport, config=config, storage=cachewarden.AsyncInMemoryStorage()
    ) as client:
        await client.start()

        transport.add_responses(
            [
                httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=body),
                httpx.ConnectError("offline"),
            ]
        )
        first = await client.get(ORIGIN + "/api/items")
        second = await client.get(ORIGIN + "/api/items")

        assert first.json() == second.json() == {"items": []}
        assert second.extensions["from_cache"]


@pytest.mark.anyio
async def test_client_takes_origin_from_base_url():
    transport = cachewarden.MockAsyncTransport()
    async with cachewarden.AsyncOfflineClient(
        transport=transport, base_url=ORIGIN, storage=cachewarden.AsyncInMemoryStorage()
    ) as client:
        transport.add_responses([httpx.Response(200) for _ in cachewarden.DEFAULT_STATIC_MANIFEST])
        await client.start()

        transport.add_responses([httpx.Response(200, text="post")])
        response = await client.get("/blog/1")
        assert response.text == "post"
        assert response.extensions["request_class"] == "other"


def test_client_requires_an_origin():
    with pytest.raises(ValueError, match="origin"):
        cachewarden.AsyncOfflineClient(transport=cachewarden.MockAsyncTransport())
