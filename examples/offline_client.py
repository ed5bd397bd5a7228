#!/usr/bin/env uv run
# /// script
# requires-python = ">=3.9"
# dependencies = [
#     "cachewarden",
# ]
#
# [tool.uv.sources]
# cachewarden = { path = "../", editable = true }
# ///

import asyncio
import logging

import anysqlite

from cachewarden import AsyncOfflineClient, AsyncSQLiteStorage, Config

logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")


async def fetch_and_print(client, url: str):
    print(f"\n➡ Sending request to {url}...")
    response = await client.get(url)

    print(f"📦 Status: {response.status_code}")
    print(f"🗂 Request Class: {response.extensions['request_class']}")
    print(f"🔄 From Cache: {response.extensions['from_cache']}")
    print(f"🧩 Synthesized: {response.extensions['synthesized']}")


async def main():
    config = Config(origin="https://www.python-httpx.org", static_manifest=["/", "/favicon.ico"])
    storage = AsyncSQLiteStorage(connection=await anysqlite.connect(":memory:"))

    async with AsyncOfflineClient(config=config, storage=storage) as client:
        report = await client.start()
        print(f"✅ Pre-cached: {report.cached}")
        print(f"❌ Failed: {report.failed}")

        await fetch_and_print(client, "https://www.python-httpx.org/")
        await fetch_and_print(client, "https://www.python-httpx.org/")
        await fetch_and_print(client, "https://www.python-httpx.org/api/nothing-here")


if __name__ == "__main__":
    asyncio.run(main())
