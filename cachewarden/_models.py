from __future__ import annotations

import time
import typing as tp
from dataclasses import dataclass, field

import httpx

from ._utils import fake_stream, normalized_url

__all__ = ("CachedResponse", "request_identity", "synthesize_response", "KNOWN_RESPONSE_EXTENSIONS")

KNOWN_RESPONSE_EXTENSIONS = ("http_version", "reason_phrase")


class CacheStream(httpx.AsyncByteStream):
    def __init__(self, stream: tp.AsyncIterable[bytes]):
        self._stream = stream

    async def __aiter__(self) -> tp.AsyncIterator[bytes]:
        async for part in self._stream:
            yield part

    async def aclose(self) -> None:
        if hasattr(self._stream, "aclose"):
            await self._stream.aclose()


def request_identity(request: httpx.Request) -> str:
    """
    Returns the key a request is stored under.

    Only the absolute URL takes part in the identity; two requests for the same URL
    always address the same entry, whatever their headers say.
    """
    return normalized_url(request.url)


@dataclass(frozen=True)
class CachedResponse:
    """
    A network response captured verbatim, ready to be stored and served again.

    `content` holds the raw body exactly as it came off the wire, so any
    `Content-Encoding` is still applied to it.
    """

    url: str
    status_code: int
    headers: tp.Tuple[tp.Tuple[bytes, bytes], ...] = ()
    content: bytes = b""
    extensions: tp.Dict[str, bytes] = field(default_factory=dict)
    created_at: float = field(default_factory=time.time)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @classmethod
    def from_httpx(cls, request: httpx.Request, response: httpx.Response, content: bytes) -> CachedResponse:
        return cls(
            url=request_identity(request),
            status_code=response.status_code,
            headers=tuple(response.headers.raw),
            content=content,
            extensions={
                key: value
                for key, value in response.extensions.items()
                if key in KNOWN_RESPONSE_EXTENSIONS and isinstance(value, bytes)
            },
        )

    def to_httpx(self, **extensions: tp.Any) -> httpx.Response:
        return httpx.Response(
            status_code=self.status_code,
            headers=list(self.headers),
            stream=CacheStream(fake_stream(self.content)),
            extensions={**self.extensions, **extensions},
        )


def synthesize_response(status_code: int, text: str, **extensions: tp.Any) -> httpx.Response:
    return httpx.Response(
        status_code=status_code,
        headers=[("Content-Type", "text/plain")],
        content=text.encode("utf-8"),
        extensions={"synthesized": True, "from_cache": False, **extensions},
    )
