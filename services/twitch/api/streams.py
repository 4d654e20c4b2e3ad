from datetime import datetime, timezone
from typing import Callable, List, Optional, Protocol, Sequence
from urllib.parse import quote

import httpx

from services.twitch.api.client import API_ROOT, build_client, get_or_none, helix_headers
from services.twitch.models.stream import LookupResult, TwitchStreamStatus
from shared.config.system import TwitchCredentials
from shared.logging.logger import get_logger

log = get_logger("twitch.streams", runtime="streamstatus")


class StreamLookup(Protocol):
    name: str

    async def lookup(self, client: httpx.AsyncClient, channel: str) -> LookupResult:
        ...


# ------------------------------------------------------------
# Strategies
# ------------------------------------------------------------

class KrakenStreamLookup:
    """
    Legacy v5 (Kraken) stream lookup.

    Authenticates with the client id only. Live when the payload carries a
    non-null `stream` object.
    """

    name = "kraken"
    URL = API_ROOT + "/kraken/streams/{channel}"

    def __init__(self, credentials: TwitchCredentials):
        self.credentials = credentials

    async def lookup(self, client: httpx.AsyncClient, channel: str) -> LookupResult:
        r = await get_or_none(
            client,
            self.URL.format(channel=quote(channel, safe="")),
            params={"client_id": self.credentials.client_id},
            headers={
                "Client-ID": self.credentials.client_id,
                "Accept": "application/vnd.twitchtv.v5+json",
            },
        )
        if r is None:
            return LookupResult.failed(self.name, error="transport error")
        if not r.is_success:
            return LookupResult.failed(self.name, status_code=r.status_code)

        data = r.json()
        return LookupResult(
            source=self.name,
            ok=True,
            is_live=isinstance(data, dict) and data.get("stream") is not None,
            status_code=r.status_code,
        )


class HelixStreamLookup:
    """
    Current (Helix) stream lookup.

    Needs a bearer token. Live when `data` lists at least one active stream.
    """

    name = "helix"
    URL = API_ROOT + "/helix/streams"

    def __init__(self, credentials: TwitchCredentials):
        self.credentials = credentials

    async def lookup(self, client: httpx.AsyncClient, channel: str) -> LookupResult:
        r = await get_or_none(
            client,
            self.URL,
            params={"user_login": channel},
            headers=helix_headers(self.credentials),
        )
        if r is None:
            return LookupResult.failed(self.name, error="transport error")
        if not r.is_success:
            return LookupResult.failed(self.name, status_code=r.status_code)

        data = r.json()
        streams = data.get("data") if isinstance(data, dict) else None
        return LookupResult(
            source=self.name,
            ok=True,
            is_live=isinstance(streams, list) and len(streams) > 0,
            status_code=r.status_code,
        )


def default_strategies(credentials: TwitchCredentials) -> List[StreamLookup]:
    return [KrakenStreamLookup(credentials), HelixStreamLookup(credentials)]


# ------------------------------------------------------------
# API
# ------------------------------------------------------------

class TwitchStreamsAPI:
    """
    Live-status check for a Twitch channel.

    Strategies are tried in order and the first successful lookup wins.
    Upstream failures never raise; when every strategy fails the result is
    None. Unexpected errors (e.g. a malformed success body) propagate to the
    caller.
    """

    def __init__(
        self,
        *,
        credentials: TwitchCredentials,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        strategies: Optional[Sequence[StreamLookup]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.credentials = credentials
        self.timeout = timeout
        self._transport = transport
        self._strategies = list(strategies) if strategies else default_strategies(credentials)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def strategies(self) -> List[StreamLookup]:
        return list(self._strategies)

    async def check_stream(self, channel: str) -> Optional[TwitchStreamStatus]:
        async with build_client(timeout=self.timeout, transport=self._transport) as client:
            for strategy in self._strategies:
                result = await strategy.lookup(client, channel)
                if result.ok:
                    log.debug(
                        f"[{channel}] {result.source} lookup succeeded "
                        f"(live={result.is_live})"
                    )
                    return TwitchStreamStatus(
                        channel=channel,
                        is_live=result.is_live,
                        checked_at=self._clock(),
                        source=result.source,
                    )

                log.info(
                    f"[{channel}] {result.source} lookup failed "
                    f"(status={result.status_code}, error={result.error})"
                )

        log.info(f"[{channel}] All stream lookups failed")
        return None
