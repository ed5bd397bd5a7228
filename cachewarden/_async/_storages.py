from __future__ import annotations

import logging
import sqlite3
import time
import typing as tp
import warnings
from collections import OrderedDict
from pathlib import Path

try:
    import anysqlite
except ImportError:  # pragma: no cover
    anysqlite = None  # type: ignore

from .._exceptions import StoreIOFailure
from .._models import CachedResponse
from .._serializers import BaseSerializer, JSONSerializer
from .._synchronization import AsyncLock
from .._utils import ensure_cache_dir

logger = logging.getLogger("cachewarden.storages")

__all__ = (
    "AsyncStore",
    "AsyncBaseStorage",
    "AsyncInMemoryStorage",
    "AsyncSQLiteStorage",
)


class AsyncStore:
    """
    A handle to one named store.

    The handle only carries the store name; every operation goes through the storage
    that opened it. Writing through a handle whose store was deleted re-creates it.
    """

    def __init__(self, name: str, storage: AsyncBaseStorage) -> None:
        self.name = name
        self._storage = storage

    async def get(self, identity: str) -> tp.Optional[CachedResponse]:
        return await self._storage.get_entry(self.name, identity)

    async def put(self, identity: str, response: CachedResponse) -> None:
        await self._storage.put_entry(self.name, identity, response)

    async def delete(self, identity: str) -> bool:
        return await self._storage.delete_entry(self.name, identity)

    async def keys(self) -> tp.List[str]:
        return await self._storage.entry_keys(self.name)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"


class AsyncBaseStorage:
    """
    A registry of named stores.

    Within a store, identities are unique and kept in insertion order; replacing an
    entry moves it to the end. Implementations raise `StoreIOFailure` when the
    underlying medium fails.
    """

    def __init__(self, serializer: tp.Optional[BaseSerializer] = None) -> None:
        self._serializer = serializer or JSONSerializer()

    async def open(self, name: str) -> AsyncStore:
        await self.create(name)
        return AsyncStore(name, self)

    async def create(self, name: str) -> None:
        raise NotImplementedError()

    async def delete(self, name: str) -> bool:
        raise NotImplementedError()

    async def names(self) -> tp.List[str]:
        raise NotImplementedError()

    async def get_entry(self, name: str, identity: str) -> tp.Optional[CachedResponse]:
        raise NotImplementedError()

    async def put_entry(self, name: str, identity: str, response: CachedResponse) -> None:
        raise NotImplementedError()

    async def delete_entry(self, name: str, identity: str) -> bool:
        raise NotImplementedError()

    async def entry_keys(self, name: str) -> tp.List[str]:
        raise NotImplementedError()

    async def match(self, identity: str, names: tp.Optional[tp.Iterable[str]] = None) -> tp.Optional[CachedResponse]:
        """
        Looks the identity up in several stores and returns the first hit.

        :param identity: The request identity
        :type identity: str
        :param names: Stores to search, in order; defaults to every existing store
        :type names: tp.Optional[tp.Iterable[str]]
        :return: The first stored response found, if any
        :rtype: tp.Optional[CachedResponse]
        """
        existing = await self.names()
        for name in names if names is not None else existing:
            if name not in existing:
                continue
            response = await self.get_entry(name, identity)
            if response is not None:
                return response
        return None

    async def aclose(self) -> None:
        raise NotImplementedError()


class AsyncInMemoryStorage(AsyncBaseStorage):
    """
    A simple in-memory storage.

    :param serializer: Not used, entries are kept as immutable objects, defaults to None
    :type serializer: tp.Optional[BaseSerializer], optional
    """

    def __init__(self, serializer: tp.Optional[BaseSerializer] = None) -> None:
        super().__init__(serializer)

        if serializer is not None:  # pragma: no cover
            warnings.warn("The serializer is not used in the in-memory storage.", RuntimeWarning)

        self._stores: tp.Dict[str, OrderedDict[str, CachedResponse]] = {}
        self._lock = AsyncLock()

    async def create(self, name: str) -> None:
        async with self._lock:
            self._stores.setdefault(name, OrderedDict())

    async def delete(self, name: str) -> bool:
        async with self._lock:
            existed = self._stores.pop(name, None) is not None
        if existed:
            logger.debug("Deleted store %r", name)
        return existed

    async def names(self) -> tp.List[str]:
        async with self._lock:
            return list(self._stores)

    async def get_entry(self, name: str, identity: str) -> tp.Optional[CachedResponse]:
        async with self._lock:
            return self._stores.get(name, {}).get(identity)

    async def put_entry(self, name: str, identity: str, response: CachedResponse) -> None:
        async with self._lock:
            entries = self._stores.setdefault(name, OrderedDict())
            entries.pop(identity, None)
            entries[identity] = response

    async def delete_entry(self, name: str, identity: str) -> bool:
        async with self._lock:
            return self._stores.get(name, {}).pop(identity, None) is not None

    async def entry_keys(self, name: str) -> tp.List[str]:
        async with self._lock:
            return list(self._stores.get(name, ()))

    async def aclose(self) -> None:  # pragma: no cover
        return


class AsyncSQLiteStorage(AsyncBaseStorage):
    """
    A simple sqlite3 storage.

    :param serializer: Serializer capable of serializing and de-serializing stored responses, defaults to None
    :type serializer: tp.Optional[BaseSerializer], optional
    :param connection: A connection for sqlite, defaults to None
    :type connection: tp.Optional[anysqlite.Connection], optional
    :param database_path: Where to create the database when no connection is given, defaults to None
    :type database_path: tp.Optional[tp.Union[str, Path]], optional
    """

    def __init__(
        self,
        serializer: tp.Optional[BaseSerializer] = None,
        connection: tp.Optional[anysqlite.Connection] = None,
        database_path: tp.Optional[tp.Union[str, Path]] = None,
    ) -> None:
        if anysqlite is None:  # pragma: no cover
            raise RuntimeError(
                f"The `{type(self).__name__}` was used, but the required packages were not found. "
                "Check that you have `anysqlite` installed.\n"
                "```pip install anysqlite```"
            )
        super().__init__(serializer)

        self._connection: tp.Optional[anysqlite.Connection] = connection or None
        self._database_path = Path(database_path) if database_path is not None else None
        self._setup_lock = AsyncLock()
        self._setup_completed: bool = False
        self._lock = AsyncLock()

    async def _setup(self) -> anysqlite.Connection:
        async with self._setup_lock:
            if not self._setup_completed:
                try:
                    if not self._connection:  # pragma: no cover
                        path = self._database_path or ensure_cache_dir() / "cachewarden.db"
                        self._connection = await anysqlite.connect(str(path), check_same_thread=False)
                    await self._connection.execute(
                        "CREATE TABLE IF NOT EXISTS stores(name TEXT PRIMARY KEY, created_at REAL NOT NULL)"
                    )
                    await self._connection.execute(
                        "CREATE TABLE IF NOT EXISTS entries("
                        "id INTEGER PRIMARY KEY AUTOINCREMENT, "
                        "store TEXT NOT NULL, "
                        "url TEXT NOT NULL, "
                        "data BLOB NOT NULL, "
                        "created_at REAL NOT NULL)"
                    )
                    await self._connection.execute(
                        "CREATE UNIQUE INDEX IF NOT EXISTS idx_entries_store_url ON entries(store, url)"
                    )
                    await self._connection.commit()
                except sqlite3.Error as exc:
                    raise StoreIOFailure(f"Could not set up the sqlite storage: {exc}") from exc
                self._setup_completed = True
        assert self._connection
        return self._connection

    async def _rollback(self, connection: anysqlite.Connection) -> None:
        try:
            await connection.rollback()
        except sqlite3.Error as exc:
            logger.debug("Rollback failed: %s", exc)

    async def create(self, name: str) -> None:
        connection = await self._setup()
        async with self._lock:
            try:
                await connection.execute(
                    "INSERT OR IGNORE INTO stores(name, created_at) VALUES(?, ?)", [name, time.time()]
                )
                await connection.commit()
            except sqlite3.Error as exc:
                raise StoreIOFailure(f"Could not open store `{name}`: {exc}") from exc

    async def delete(self, name: str) -> bool:
        connection = await self._setup()
        async with self._lock:
            try:
                cursor = await connection.execute("SELECT 1 FROM stores WHERE name = ?", [name])
                existed = await cursor.fetchone() is not None
                await connection.execute("DELETE FROM stores WHERE name = ?", [name])
                await connection.execute("DELETE FROM entries WHERE store = ?", [name])
                await connection.commit()
            except sqlite3.Error as exc:
                await self._rollback(connection)
                raise StoreIOFailure(f"Could not delete store `{name}`: {exc}") from exc
        if existed:
            logger.debug("Deleted store %r", name)
        return existed

    async def names(self) -> tp.List[str]:
        connection = await self._setup()
        async with self._lock:
            try:
                cursor = await connection.execute("SELECT name FROM stores ORDER BY rowid")
                rows = await cursor.fetchall()
            except sqlite3.Error as exc:
                raise StoreIOFailure(f"Could not list stores: {exc}") from exc
        return [row[0] for row in rows]

    async def get_entry(self, name: str, identity: str) -> tp.Optional[CachedResponse]:
        connection = await self._setup()
        async with self._lock:
            try:
                cursor = await connection.execute(
                    "SELECT data FROM entries WHERE store = ? AND url = ?", [name, identity]
                )
                row = await cursor.fetchone()
            except sqlite3.Error as exc:
                raise StoreIOFailure(f"Could not read {identity} from `{name}`: {exc}") from exc
        if row is None:
            return None
        try:
            return self._serializer.loads(row[0])
        except Exception as exc:
            raise StoreIOFailure(f"Could not decode {identity} from `{name}`: {exc!r}") from exc

    async def put_entry(self, name: str, identity: str, response: CachedResponse) -> None:
        connection = await self._setup()
        try:
            serialized_response = self._serializer.dumps(response)
        except Exception as exc:
            raise StoreIOFailure(f"Could not encode {identity} for `{name}`: {exc!r}") from exc
        async with self._lock:
            try:
                await connection.execute(
                    "INSERT OR IGNORE INTO stores(name, created_at) VALUES(?, ?)", [name, time.time()]
                )
                # Deleting first gives the replacement a fresh id, moving it to the end of the store.
                await connection.execute("DELETE FROM entries WHERE store = ? AND url = ?", [name, identity])
                await connection.execute(
                    "INSERT INTO entries(store, url, data, created_at) VALUES(?, ?, ?, ?)",
                    [name, identity, serialized_response, response.created_at],
                )
                await connection.commit()
            except sqlite3.Error as exc:
                await self._rollback(connection)
                raise StoreIOFailure(f"Could not write {identity} to `{name}`: {exc}") from exc

    async def delete_entry(self, name: str, identity: str) -> bool:
        connection = await self._setup()
        async with self._lock:
            try:
                cursor = await connection.execute(
                    "SELECT 1 FROM entries WHERE store = ? AND url = ?", [name, identity]
                )
                existed = await cursor.fetchone() is not None
                await connection.execute("DELETE FROM entries WHERE store = ? AND url = ?", [name, identity])
                await connection.commit()
            except sqlite3.Error as exc:
                await self._rollback(connection)
                raise StoreIOFailure(f"Could not delete {identity} from `{name}`: {exc}") from exc
        return existed

    async def entry_keys(self, name: str) -> tp.List[str]:
        connection = await self._setup()
        async with self._lock:
            try:
                cursor = await connection.execute("SELECT url FROM entries WHERE store = ? ORDER BY id", [name])
                rows = await cursor.fetchall()
            except sqlite3.Error as exc:
                raise StoreIOFailure(f"Could not list entries of `{name}`: {exc}") from exc
        return [row[0] for row in rows]

    async def aclose(self) -> None:
        if self._connection is not None:
            await self._connection.close()
