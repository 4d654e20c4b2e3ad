"""
Time-boxed live/archive cache for the stream widget.

Two keys per channel live in the key-value store:

    <channel>_stream_status       "live" | "archive"
    <channel>_stream_status_time  millisecond epoch of that value

An entry younger than the TTL is used as-is. Anything else (missing, stale,
malformed, unreadable storage) goes back to the status source. Resolution
never raises: the widget must always have a state to render.
"""

from __future__ import annotations

import time
from typing import Callable, Optional, Tuple

from services.stream_widget.sources import StatusSource, StatusSourceError
from shared.logging.logger import get_logger
from shared.platforms.state import DisplayPanels, DisplayState, render_display
from shared.storage.kv import KeyValueStore, StorageUnavailable

log = get_logger("widget.cache", runtime="widget")

CACHE_TTL_MS = 120_000


def cache_keys(channel: str) -> Tuple[str, str]:
    value_key = f"{channel}_stream_status"
    return value_key, value_key + "_time"


def _epoch_millis() -> int:
    return int(time.time() * 1000)


class StreamStatusCache:
    def __init__(
        self,
        store: KeyValueStore,
        source: StatusSource,
        *,
        channel: str,
        ttl_ms: int = CACHE_TTL_MS,
        clock: Optional[Callable[[], int]] = None,
    ):
        self.store = store
        self.source = source
        self.channel = channel
        self.ttl_ms = ttl_ms
        self._clock = clock or _epoch_millis

    # ------------------------------------------------------------------ #
    # Cache access
    # ------------------------------------------------------------------ #

    def cached_state(self, channel: str, now: int) -> Optional[DisplayState]:
        """Return the cached state when it is still fresh, else None.

        A saved time in the future counts as fresh.
        """
        value_key, time_key = cache_keys(channel)
        try:
            saved_raw = self.store.get(time_key)
            if not saved_raw:
                return None
            saved_at = int(saved_raw)
            if now - saved_at >= self.ttl_ms:
                return None
            value = self.store.get(value_key)
        except StorageUnavailable as e:
            log.debug(f"[{channel}] Status cache unreadable, treating as miss: {e}")
            return None
        except ValueError:
            log.debug(f"[{channel}] Malformed cache timestamp {saved_raw!r}")
            return None

        if not value:
            return None
        return DisplayState.from_value(value)

    def _save(self, channel: str, state: DisplayState, now: int) -> None:
        value_key, time_key = cache_keys(channel)
        try:
            self.store.set(value_key, state.value)
            self.store.set(time_key, str(now))
        except StorageUnavailable as e:
            log.debug(f"[{channel}] Status cache not writable: {e}")

    # ------------------------------------------------------------------ #
    # Resolution
    # ------------------------------------------------------------------ #

    async def resolve_status(self, channel: Optional[str] = None) -> DisplayState:
        channel = channel or self.channel
        try:
            now = self._clock()

            cached = self.cached_state(channel, now)
            if cached is not None:
                return cached

            try:
                state = await self.source.fetch(channel)
            except StatusSourceError as e:
                log.info(f"[{channel}] Status source unavailable, showing archive: {e}")
                state = DisplayState.ARCHIVE

            self._save(channel, state, now)
            return state

        except Exception as e:
            log.warning(f"[{channel}] Status resolution failed, showing archive: {e!r}")
            return DisplayState.ARCHIVE

    async def refresh(self) -> DisplayPanels:
        """Page-load sequence: resolve the tracked channel and render."""
        return render_display(await self.resolve_status())

    async def on_visible(self) -> DisplayPanels:
        return await self.refresh()

    async def on_visibility_change(self, hidden: bool) -> Optional[DisplayPanels]:
        if hidden:
            return None
        return await self.on_visible()


__all__ = ["CACHE_TTL_MS", "cache_keys", "StreamStatusCache"]
