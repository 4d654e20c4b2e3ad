"""Shared pytest fixtures for proxy and widget tests."""

import os
import tempfile
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

# Keep per-run log files out of the working tree.
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="streamstatus-logs-"))

import httpx
import pytest

from shared.config.system import RuntimeConfig, TwitchCredentials


FIXED_NOW = datetime(2026, 10, 19, 12, 30, 0, tzinfo=timezone.utc)
FIXED_NOW_ISO = "2026-10-19T12:30:00.000Z"

Reply = Union[Tuple[int, Any], Exception]


# =============================================================================
# Upstream mock - records every request and answers per URL path
# =============================================================================

class UpstreamRecorder:
    """Callable for httpx.MockTransport.

    `replies` maps a URL path to either (status, body) or an exception to
    raise. A body that is a str is sent verbatim; anything else as JSON.
    Paths without a reply answer 404.
    """

    def __init__(self, replies: Optional[Dict[str, Reply]] = None):
        self.replies: Dict[str, Reply] = dict(replies or {})
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.replies.get(request.url.path)

        if reply is None:
            return httpx.Response(404, json={"error": "Not Found"})
        if isinstance(reply, Exception):
            raise reply

        status, body = reply
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def credentials() -> TwitchCredentials:
    return TwitchCredentials(client_id="test-client-id", access_token="test-token")


@pytest.fixture
def runtime_config(credentials) -> RuntimeConfig:
    config = RuntimeConfig(twitch=credentials)
    config.proxy.host = "127.0.0.1"
    config.proxy.port = 0
    config.proxy.upstream_timeout = 2.0
    return config


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def upstream():
    return UpstreamRecorder()
