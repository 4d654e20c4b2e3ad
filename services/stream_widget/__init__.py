"""Client-side live/archive state for the profile page stream widget."""

from .cache import CACHE_TTL_MS, StreamStatusCache, cache_keys
from .embeds import player_embeds
from .preferences import BgmPreference
from .sources import (
    DirectStatusSource,
    ProxyStatusSource,
    StaticStatusSource,
    StatusSourceError,
    build_status_source,
)

__all__ = [
    "CACHE_TTL_MS",
    "StreamStatusCache",
    "cache_keys",
    "player_embeds",
    "BgmPreference",
    "DirectStatusSource",
    "ProxyStatusSource",
    "StaticStatusSource",
    "StatusSourceError",
    "build_status_source",
]
