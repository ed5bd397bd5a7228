from __future__ import annotations

import typing as tp
from dataclasses import dataclass, field

import httpx

from ._utils import Origin, origin_of

__all__ = ("Config", "StoreNames", "DEFAULT_STATIC_MANIFEST", "DEFAULT_MAX_DYNAMIC_ENTRIES", "STORE_ROLES")

DEFAULT_STATIC_MANIFEST = ("/", "/index.html", "/manifest.json", "/logo.png")
DEFAULT_MAX_DYNAMIC_ENTRIES = 50
STORE_ROLES = ("static", "dynamic", "api")


@dataclass(frozen=True)
class StoreNames:
    """
    Names of the stores that make up the current generation.

    Any store whose name is not listed here is removed during activation.
    """

    static: str = "static"
    dynamic: str = "dynamic"
    api: str = "api"

    def __post_init__(self) -> None:
        names = self.allow_list
        if len(set(names)) != len(names):
            raise ValueError(f"Store names must be distinct, got {names}")

    @property
    def allow_list(self) -> tp.Tuple[str, str, str]:
        return self.static, self.dynamic, self.api

    def for_role(self, role: str) -> str:
        if role not in STORE_ROLES:
            raise KeyError(f"Unknown store role `{role}`. Please use one of {STORE_ROLES}")
        return tp.cast(str, getattr(self, role))


@dataclass(frozen=True)
class Config:
    """
    Routing and storage settings for one deployment generation.

    :param origin: The application's own origin; requests to any other origin are never cached
    :type origin: str
    :param static_manifest: Absolute paths pre-populated into the static store on install
    :type static_manifest: tp.Sequence[str]
    :param store_names: Names of the static, dynamic and api stores
    :type store_names: StoreNames
    :param max_entries: Maximum number of entries per store role; roles not listed are unbounded
    :type max_entries: tp.Mapping[str, int]
    :param api_prefix: Path prefix that marks a request as an API call
    :type api_prefix: str
    :param match_all_stores: Whether cache-first and network-first look up the identity in every
        store of the generation instead of the dynamic store only
    :type match_all_stores: bool
    """

    origin: str
    static_manifest: tp.Sequence[str] = DEFAULT_STATIC_MANIFEST
    store_names: StoreNames = field(default_factory=StoreNames)
    max_entries: tp.Mapping[str, int] = field(default_factory=lambda: {"dynamic": DEFAULT_MAX_DYNAMIC_ENTRIES})
    api_prefix: str = "/api/"
    match_all_stores: bool = False

    def __post_init__(self) -> None:
        url = httpx.URL(self.origin)
        if not url.scheme or not url.host:
            raise ValueError(f"Origin must be an absolute URL, got `{self.origin}`")

        object.__setattr__(self, "static_manifest", tuple(self.static_manifest))
        for path in self.static_manifest:
            if not path.startswith("/"):
                raise ValueError(f"Manifest entries must be absolute paths, got `{path}`")

        for role, bound in self.max_entries.items():
            if role not in STORE_ROLES:
                raise ValueError(f"Unknown store role `{role}`. Please use one of {STORE_ROLES}")
            if bound <= 0:
                raise ValueError(f"Maximum entries for `{role}` must be positive")

        if not self.api_prefix.startswith("/"):
            raise ValueError(f"API prefix must be an absolute path, got `{self.api_prefix}`")

    @property
    def origin_key(self) -> Origin:
        return origin_of(self.origin)

    def resolve(self, path: str) -> str:
        """Turns a manifest path into an absolute URL on the configured origin."""
        return str(httpx.URL(self.origin).join(path))

    def bound_for(self, store_name: str) -> tp.Optional[int]:
        for role, bound in self.max_entries.items():
            if self.store_names.for_role(role) == store_name:
                return bound
        return None
