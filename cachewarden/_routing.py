from __future__ import annotations

import enum
import typing as tp

import httpx

from ._config import Config
from ._utils import origin_of

__all__ = ("RequestClass", "classify")


class RequestClass(enum.Enum):
    STATIC_ASSET = "static-asset"
    API_CALL = "api-call"
    OTHER = "other"


def classify(request: httpx.Request, config: Config) -> tp.Optional[RequestClass]:
    """
    Decides which strategy serves the request.

    Returns `None` when the request must not be intercepted at all: it targets
    another origin, or it is not a GET and therefore has no cache identity.
    """
    if origin_of(request.url) != config.origin_key:
        return None

    if request.method != "GET":
        return None

    path = request.url.path
    if path == "/" or path in config.static_manifest:
        return RequestClass.STATIC_ASSET
    if path.startswith(config.api_prefix):
        return RequestClass.API_CALL
    return RequestClass.OTHER
