from __future__ import annotations

import typing as tp
from pathlib import Path

import httpx

HEADERS_ENCODING = "iso-8859-1"

T = tp.TypeVar("T")

Origin = tp.Tuple[str, str, tp.Optional[int]]


def origin_of(url: tp.Union[str, httpx.URL]) -> Origin:
    """
    Returns the (scheme, host, port) triple of an URL.

    Default ports are normalized away by `httpx.URL`, so `https://example.com` and
    `https://example.com:443` share an origin.
    """
    url = httpx.URL(url)
    return url.scheme, url.host, url.port


def normalized_url(url: tp.Union[str, httpx.URL]) -> str:
    return str(httpx.URL(url).copy_with(fragment=None))


def partition(iterable: tp.Iterable[T], predicate: tp.Callable[[T], bool]) -> tp.Tuple[tp.List[T], tp.List[T]]:
    """
    Partition an iterable into two lists: one for matching items and one for non-matching items.

    Args:
        iterable (tp.Iterable[T]): The input iterable to partition.
        predicate (tp.Callable[[T], bool]): A function that evaluates each item in the iterable.

    Returns:
        tp.Tuple[tp.List[T], tp.List[T]]: A tuple containing two lists: the first for matching items,
        and the second for non-matching items.
    Example:
        ```
        names = ["static", "old-cache-v1", "api"]
        kept, stale = partition(names, lambda name: name in {"static", "api"})
        ```
    """
    matching, non_matching = [], []
    for item in iterable:
        if predicate(item):
            matching.append(item)
        else:
            non_matching.append(item)
    return matching, non_matching


async def fake_stream(content: bytes) -> tp.AsyncIterator[bytes]:
    yield content


def ensure_cache_dir(base_path: Path | None = None) -> Path:
    _base_path = base_path if base_path is not None else Path(".cache/cachewarden")
    _gitignore_file = _base_path / ".gitignore"

    _base_path.mkdir(parents=True, exist_ok=True)

    if not _gitignore_file.is_file():
        with open(_gitignore_file, "w", encoding="utf-8") as f:
            f.write("# Automatically created by cachewarden\n*")
    return _base_path
