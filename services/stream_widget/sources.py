"""
Status sources for the stream widget.

A source answers one question: is the channel live right now. Which one the
widget uses is an explicit setting (STATUS_SOURCE):

- proxy  : ask the stream proxy over HTTP (authoritative, default)
- direct : run the Twitch lookup chain in-process
- static : always archive, no network at all

Sources raise StatusSourceError when they cannot answer; the cache turns
that into the archive fallback.
"""

from __future__ import annotations

from typing import Optional, Protocol
from urllib.parse import quote

import httpx

from services.twitch.api.streams import TwitchStreamsAPI, default_strategies
from shared.config.system import RuntimeConfig
from shared.logging.logger import get_logger
from shared.platforms.state import DisplayState

log = get_logger("widget.sources", runtime="widget")

# Headroom on top of the proxy's own worst case (every lookup timing out).
PROXY_TIMEOUT_MARGIN = 5.0


class StatusSourceError(RuntimeError):
    """Raised when a status source cannot determine the live state."""


class StatusSource(Protocol):
    name: str

    async def fetch(self, channel: str) -> DisplayState:
        ...


class ProxyStatusSource:
    name = "proxy"

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def fetch(self, channel: str) -> DisplayState:
        url = f"{self.base_url}/api/stream/{quote(channel, safe='')}"

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                r = await client.get(url)
                r.raise_for_status()
                data = r.json()
            except httpx.HTTPStatusError as e:
                raise StatusSourceError(
                    f"proxy answered {e.response.status_code} for {channel}"
                ) from e
            except (httpx.HTTPError, ValueError) as e:
                raise StatusSourceError(f"proxy request failed: {e!r}") from e

        if not isinstance(data, dict) or not isinstance(data.get("isLive"), bool):
            raise StatusSourceError("proxy payload missing boolean isLive")

        return DisplayState.from_value(data["isLive"])


class DirectStatusSource:
    name = "direct"

    def __init__(self, streams: TwitchStreamsAPI):
        self._streams = streams

    async def fetch(self, channel: str) -> DisplayState:
        status = await self._streams.check_stream(channel)
        if status is None:
            raise StatusSourceError(f"no upstream lookup succeeded for {channel}")
        return DisplayState.from_value(status.is_live)


class StaticStatusSource:
    """Always reports archive; mirrors pages with no status check wired in."""

    name = "static"

    async def fetch(self, channel: str) -> DisplayState:
        return DisplayState.ARCHIVE


def proxy_timeout(config: RuntimeConfig) -> float:
    """
    Client timeout for one proxy request.

    The proxy may walk the whole lookup chain before answering, so the
    default budget covers one upstream timeout per strategy plus a margin.
    PROXY_TIMEOUT_SECONDS overrides it.
    """
    if config.widget.proxy_timeout is not None:
        return config.widget.proxy_timeout
    chain = len(default_strategies(config.twitch))
    return chain * config.proxy.upstream_timeout + PROXY_TIMEOUT_MARGIN


def build_status_source(
    config: RuntimeConfig,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> StatusSource:
    mode = config.widget.status_source
    timeout = config.proxy.upstream_timeout

    if mode == "direct":
        source: StatusSource = DirectStatusSource(
            TwitchStreamsAPI(
                credentials=config.twitch, timeout=timeout, transport=transport
            )
        )
    elif mode == "static":
        source = StaticStatusSource()
    else:
        source = ProxyStatusSource(
            config.widget.proxy_base_url,
            timeout=proxy_timeout(config),
            transport=transport,
        )

    log.info(f"Widget status source: {source.name}")
    return source


__all__ = [
    "StatusSourceError",
    "StatusSource",
    "ProxyStatusSource",
    "DirectStatusSource",
    "StaticStatusSource",
    "build_status_source",
    "proxy_timeout",
    "PROXY_TIMEOUT_MARGIN",
]
