from __future__ import annotations

import types
import typing as tp

import anyio
from anyio.abc import TaskGroup

__all__ = ("AsyncLock", "AsyncBackgroundTasks")


class AsyncLock:
    def __init__(self) -> None:
        self._lock = anyio.Lock()

    async def __aenter__(self) -> None:
        await self._lock.acquire()

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: types.TracebackType | None = None,
    ) -> None:
        self._lock.release()


class AsyncBackgroundTasks:
    """
    Runs fire-and-forget work that may outlive the request that started it.

    Work is scheduled on an `anyio` task group that lives between `__aenter__` and
    `__aexit__`; leaving the context waits for everything still pending.
    """

    def __init__(self) -> None:
        self._task_group: tp.Optional[TaskGroup] = None

    @property
    def running(self) -> bool:
        return self._task_group is not None

    def start_soon(self, func: tp.Callable[..., tp.Awaitable[tp.Any]], *args: tp.Any) -> None:
        if self._task_group is None:
            raise RuntimeError("Background tasks are not running. Use the owner as an async context manager first.")
        self._task_group.start_soon(func, *args)

    async def __aenter__(self) -> None:
        if self._task_group is not None:
            raise RuntimeError("Background tasks are already running.")
        task_group = anyio.create_task_group()
        await task_group.__aenter__()
        self._task_group = task_group

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: types.TracebackType | None = None,
    ) -> None:
        task_group, self._task_group = self._task_group, None
        if task_group is not None:
            await task_group.__aexit__(exc_type, exc_value, traceback)
