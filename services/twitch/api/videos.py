from datetime import datetime, timezone
from typing import Callable, Optional

import httpx

from services.twitch.api.client import API_ROOT, build_client, get_or_none, helix_headers
from services.twitch.models.stream import ChannelNotFound, TwitchVideoList, VideosUnavailable
from shared.config.system import TwitchCredentials
from shared.logging.logger import get_logger

log = get_logger("twitch.videos", runtime="streamstatus")


class TwitchVideosAPI:
    """
    Recent-video listing via Helix.

    Two sequential calls:
    - Resolve the channel login to a user id
    - List that user's most recent videos, newest first

    Raises ChannelNotFound when the first call fails (the second is never
    attempted) and VideosUnavailable when the second one does.
    """

    USERS_URL = API_ROOT + "/helix/users"
    VIDEOS_URL = API_ROOT + "/helix/videos"
    MAX_VIDEOS = 10

    def __init__(
        self,
        *,
        credentials: TwitchCredentials,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.credentials = credentials
        self.timeout = timeout
        self._transport = transport
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    # ------------------------------------------------------------

    async def recent_videos(self, channel: str) -> TwitchVideoList:
        async with build_client(timeout=self.timeout, transport=self._transport) as client:
            user_id = await self._resolve_user_id(client, channel)
            videos = await self._list_videos(client, channel, user_id)

        return TwitchVideoList(
            channel=channel,
            videos=videos,
            checked_at=self._clock(),
        )

    # ------------------------------------------------------------
    # User resolution
    # ------------------------------------------------------------

    async def _resolve_user_id(self, client: httpx.AsyncClient, channel: str) -> str:
        r = await get_or_none(
            client,
            self.USERS_URL,
            params={"login": channel},
            headers=helix_headers(self.credentials),
        )
        if r is None or not r.is_success:
            status = r.status_code if r is not None else None
            log.info(f"[{channel}] User lookup failed (status={status})")
            raise ChannelNotFound(channel)

        users = r.json().get("data") or []
        if not users:
            log.info(f"[{channel}] User lookup returned no users")
            raise ChannelNotFound(channel)

        return str(users[0]["id"])

    # ------------------------------------------------------------
    # Video listing
    # ------------------------------------------------------------

    async def _list_videos(
        self,
        client: httpx.AsyncClient,
        channel: str,
        user_id: str,
    ) -> list:
        r = await get_or_none(
            client,
            self.VIDEOS_URL,
            params={"user_id": user_id, "sort": "time", "first": self.MAX_VIDEOS},
            headers=helix_headers(self.credentials),
        )
        if r is None or not r.is_success:
            status = r.status_code if r is not None else None
            log.info(f"[{channel}] Video listing failed (status={status})")
            raise VideosUnavailable(channel)

        videos = r.json().get("data")
        return videos if isinstance(videos, list) else []
