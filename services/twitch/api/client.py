"""
Shared HTTP plumbing for Twitch API modules.

Clients are created per operation and closed on exit. Every call is bounded
by a timeout; a timeout is a transport error like any other and is reported
as a failed call rather than raised.
"""

from typing import Any, Dict, Optional

import httpx

from shared.config.system import TwitchCredentials
from shared.logging.logger import get_logger

log = get_logger("twitch.api.client")

API_ROOT = "https://api.twitch.tv"


def build_client(
    *,
    timeout: float,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=timeout, transport=transport)


def helix_headers(credentials: TwitchCredentials) -> Dict[str, str]:
    return {
        "Client-ID": credentials.client_id,
        "Authorization": f"Bearer {credentials.access_token}",
    }


async def get_or_none(
    client: httpx.AsyncClient,
    url: str,
    *,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> Optional[httpx.Response]:
    """
    Issue a GET and return the response, or None on a transport failure.

    Non-2xx responses are returned as-is; callers check `is_success`.
    """
    try:
        return await client.get(url, params=params, headers=headers)
    except httpx.TransportError as e:
        log.warning(f"Twitch request to {url} failed: {e!r}")
        return None
