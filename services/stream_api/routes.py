"""Request handlers for the stream proxy.

Handlers are plain coroutines returning (status, payload) pairs so they can
be exercised without a socket. Each call is independent; nothing is shared
between requests besides the immutable API clients.
"""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Dict, Optional, Tuple
from urllib.parse import unquote

from runtime.version import VERSION
from services.twitch.api.streams import TwitchStreamsAPI
from services.twitch.api.videos import TwitchVideosAPI
from services.twitch.models.stream import ChannelNotFound, VideosUnavailable
from shared.logging.logger import get_logger

log = get_logger("services.stream_api.routes")

# Current paths first; the /api/twitch/ prefix is kept for older pages.
STREAM_PREFIXES = ("/api/stream/", "/api/twitch/stream/")
VIDEOS_PREFIXES = ("/api/videos/", "/api/twitch/videos/")
HEALTH_PATH = "/api/health"


@dataclass
class ApiResponse:
    status: int
    payload: Dict[str, Any]


def _not_found(message: str) -> ApiResponse:
    return ApiResponse(HTTPStatus.NOT_FOUND, {"error": message})


def _channel_from_path(path: str, prefixes: Tuple[str, ...]) -> Optional[str]:
    for prefix in prefixes:
        if path.startswith(prefix):
            channel = unquote(path[len(prefix):]).strip("/")
            if channel and "/" not in channel and channel not in (".", ".."):
                return channel
            return None
    return None


class StreamApiRoutes:
    def __init__(self, *, streams: TwitchStreamsAPI, videos: TwitchVideosAPI) -> None:
        self._streams = streams
        self._videos = videos

    async def stream_status(self, channel: str) -> ApiResponse:
        try:
            status = await self._streams.check_stream(channel)
        except Exception as e:
            log.error(f"Error checking stream status for {channel}: {e!r}")
            return ApiResponse(
                HTTPStatus.INTERNAL_SERVER_ERROR,
                {"error": "Failed to check stream status", "message": str(e)},
            )

        if status is None:
            return _not_found("Channel not found")
        return ApiResponse(HTTPStatus.OK, status.to_dict())

    async def recent_videos(self, channel: str) -> ApiResponse:
        try:
            listing = await self._videos.recent_videos(channel)
        except ChannelNotFound:
            return _not_found("Channel not found")
        except VideosUnavailable:
            return _not_found("Failed to get videos")
        except Exception as e:
            log.error(f"Error getting videos for {channel}: {e!r}")
            return ApiResponse(
                HTTPStatus.INTERNAL_SERVER_ERROR,
                {"error": "Failed to get videos", "message": str(e)},
            )

        return ApiResponse(HTTPStatus.OK, listing.to_dict())

    async def health(self) -> ApiResponse:
        return ApiResponse(HTTPStatus.OK, {"status": "ok", "version": VERSION})

    async def dispatch(self, path: str) -> ApiResponse:
        """Route a GET path to its handler."""

        if path.rstrip("/") == HEALTH_PATH:
            return await self.health()

        handlers = (
            (STREAM_PREFIXES, self.stream_status),
            (VIDEOS_PREFIXES, self.recent_videos),
        )
        for prefixes, handler in handlers:
            if path.startswith(prefixes):
                channel = _channel_from_path(path, prefixes)
                if channel is None:
                    return _not_found("Channel not found")
                return await handler(channel)

        return _not_found("Not found")


__all__ = ["ApiResponse", "StreamApiRoutes"]
