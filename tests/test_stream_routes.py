"""Unit tests for proxy request handlers (no sockets)."""

import pytest

from services.stream_api.routes import StreamApiRoutes
from services.twitch.api.streams import TwitchStreamsAPI
from services.twitch.api.videos import TwitchVideosAPI
from runtime.version import VERSION

from tests.conftest import FIXED_NOW_ISO

KRAKEN = "/kraken/streams/nekonekoax"
HELIX = "/helix/streams"
USERS = "/helix/users"
VIDEOS = "/helix/videos"


@pytest.fixture
def routes(credentials, upstream, fixed_clock):
    transport = upstream.transport()
    return StreamApiRoutes(
        streams=TwitchStreamsAPI(
            credentials=credentials, transport=transport, clock=fixed_clock
        ),
        videos=TwitchVideosAPI(
            credentials=credentials, transport=transport, clock=fixed_clock
        ),
    )


class TestStreamEndpoint:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_primary_live(self, routes, upstream):
        upstream.replies[KRAKEN] = (200, {"stream": {"_id": 42}})

        response = await routes.dispatch("/api/stream/nekonekoax")

        assert response.status == 200
        assert response.payload["isLive"] is True

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_deprecated_primary_scenario(self, routes, upstream):
        upstream.replies[KRAKEN] = (410, {"error": "Gone"})
        upstream.replies[HELIX] = (200, {"data": []})

        response = await routes.dispatch("/api/stream/nekonekoax")

        assert response.status == 200
        assert response.payload == {
            "channel": "nekonekoax",
            "isLive": False,
            "timestamp": FIXED_NOW_ISO,
        }
        assert upstream.requests[1].url.params["user_login"] == "nekonekoax"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_both_variants_failing_is_404(self, routes, upstream):
        upstream.replies[KRAKEN] = (410, {})
        upstream.replies[HELIX] = (401, {})

        response = await routes.dispatch("/api/stream/nekonekoax")

        assert response.status == 404
        assert response.payload == {"error": "Channel not found"}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unexpected_error_is_500(self, routes, upstream):
        upstream.replies[KRAKEN] = (200, "definitely not json")

        response = await routes.dispatch("/api/stream/nekonekoax")

        assert response.status == 500
        assert response.payload["error"] == "Failed to check stream status"
        assert response.payload["message"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_legacy_prefix_routes_to_same_handler(self, routes, upstream):
        upstream.replies[KRAKEN] = (200, {"stream": None})

        response = await routes.dispatch("/api/twitch/stream/nekonekoax")

        assert response.status == 200
        assert response.payload["isLive"] is False


class TestVideosEndpoint:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_success(self, routes, upstream):
        upstream.replies[USERS] = (200, {"data": [{"id": "99"}]})
        upstream.replies[VIDEOS] = (200, {"data": [{"id": "v1"}]})

        response = await routes.dispatch("/api/videos/nekonekoax")

        assert response.status == 200
        assert response.payload == {
            "channel": "nekonekoax",
            "videos": [{"id": "v1"}],
            "timestamp": FIXED_NOW_ISO,
        }

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failed_user_lookup(self, routes, upstream):
        upstream.replies[USERS] = (400, {})

        response = await routes.dispatch("/api/videos/nekonekoax")

        assert response.status == 404
        assert response.payload == {"error": "Channel not found"}
        assert upstream.paths() == [USERS]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failed_video_listing(self, routes, upstream):
        upstream.replies[USERS] = (200, {"data": [{"id": "99"}]})
        upstream.replies[VIDEOS] = (500, {})

        response = await routes.dispatch("/api/videos/nekonekoax")

        assert response.status == 404
        assert response.payload == {"error": "Failed to get videos"}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unexpected_error_is_500(self, routes, upstream):
        upstream.replies[USERS] = (200, "<html>")

        response = await routes.dispatch("/api/videos/nekonekoax")

        assert response.status == 500
        assert response.payload["error"] == "Failed to get videos"
        assert "message" in response.payload


class TestRouting:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_health(self, routes):
        response = await routes.dispatch("/api/health")

        assert response.status == 200
        assert response.payload == {"status": "ok", "version": VERSION}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unknown_path(self, routes, upstream):
        response = await routes.dispatch("/api/unknown")

        assert response.status == 404
        assert upstream.requests == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_empty_channel_segment(self, routes, upstream):
        response = await routes.dispatch("/api/stream/")

        assert response.status == 404
        assert response.payload == {"error": "Channel not found"}
        assert upstream.requests == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_nested_channel_segment(self, routes, upstream):
        response = await routes.dispatch("/api/videos/a/b")

        assert response.status == 404
        assert upstream.requests == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "path",
        [
            "/api/stream/..",
            "/api/stream/.",
            "/api/stream/%2E%2E",
            "/api/twitch/stream/%2e",
            "/api/videos/..",
        ],
    )
    async def test_dot_segments_are_not_channels(self, routes, upstream, path):
        response = await routes.dispatch(path)

        assert response.status == 404
        assert upstream.requests == []
