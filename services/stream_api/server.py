"""HTTP server for the read-only stream proxy."""

from __future__ import annotations

import asyncio
import json
import threading
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse

import httpx

from services.stream_api.routes import StreamApiRoutes
from services.twitch.api.streams import TwitchStreamsAPI
from services.twitch.api.videos import TwitchVideosAPI
from shared.config.system import RuntimeConfig
from shared.logging.logger import get_logger

log = get_logger("services.stream_api")


def build_routes(
    config: RuntimeConfig,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> StreamApiRoutes:
    timeout = config.proxy.upstream_timeout
    return StreamApiRoutes(
        streams=TwitchStreamsAPI(
            credentials=config.twitch, timeout=timeout, transport=transport
        ),
        videos=TwitchVideosAPI(
            credentials=config.twitch, timeout=timeout, transport=transport
        ),
    )


class StreamApiServer:
    """
    Threaded HTTP server in front of StreamApiRoutes.

    Every request runs its handler coroutine on a fresh event loop in the
    request thread, so a failing or slow request never affects the others.
    """

    def __init__(
        self,
        config: RuntimeConfig,
        *,
        routes: Optional[StreamApiRoutes] = None,
    ) -> None:
        self._config = config
        self._routes = routes or build_routes(config)
        self._thread: Optional[threading.Thread] = None
        self._server: Optional[ThreadingHTTPServer] = None

    @property
    def address(self) -> Optional[Tuple[str, int]]:
        if not self._server:
            return None
        host, port = self._server.server_address[:2]
        return str(host), int(port)

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return

        handler = self._build_handler()
        self._server = ThreadingHTTPServer(
            (self._config.proxy.host, int(self._config.proxy.port)),
            handler,
        )
        self._server.daemon_threads = True
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()

        host, port = self.address
        log.info("Stream proxy running on http://%s:%s", host, port)
        log.info("Stream status API: GET /api/stream/<channel>")
        log.info("Recent videos API: GET /api/videos/<channel>")

    def stop(self) -> None:
        if not self._server:
            return
        self._server.shutdown()
        self._server.server_close()
        self._server = None
        if self._thread:
            self._thread.join(timeout=5)
            self._thread = None
        log.info("Stream proxy stopped")

    def _build_handler(self):
        allow_origins: List[str] = list(self._config.proxy.allow_origins)
        routes = self._routes

        class Handler(BaseHTTPRequestHandler):
            def _send_json(self, status: int, payload: Dict[str, Any]) -> None:
                body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
                self.send_response(status)
                self.send_header("Content-Type", "application/json; charset=utf-8")
                self.send_header("Content-Length", str(len(body)))
                self._apply_cors()
                try:
                    self.end_headers()
                    self.wfile.write(body)
                except (BrokenPipeError, ConnectionResetError) as e:
                    # Client went away before the reply was written.
                    self.close_connection = True
                    log.debug(f"Client disconnected before response: {e!r}")

            def _apply_cors(self) -> None:
                if not allow_origins:
                    return
                origin = self.headers.get("Origin")
                if "*" in allow_origins:
                    self.send_header("Access-Control-Allow-Origin", "*")
                elif origin and origin in allow_origins:
                    self.send_header("Access-Control-Allow-Origin", origin)
                    self.send_header("Vary", "Origin")
                self.send_header("Access-Control-Allow-Headers", "Content-Type")
                self.send_header("Access-Control-Allow-Methods", "GET, OPTIONS")

            def do_OPTIONS(self) -> None:  # noqa: N802 - stdlib signature
                self.send_response(HTTPStatus.NO_CONTENT)
                self._apply_cors()
                self.end_headers()

            def do_GET(self) -> None:  # noqa: N802 - stdlib signature
                parsed = urlparse(self.path)
                if not parsed.path.startswith("/api/"):
                    return self._send_json(HTTPStatus.NOT_FOUND, {"error": "Not found"})

                try:
                    response = asyncio.run(routes.dispatch(parsed.path))
                except Exception as e:
                    log.error(f"Unhandled error serving {parsed.path}: {e!r}")
                    return self._send_json(
                        HTTPStatus.INTERNAL_SERVER_ERROR,
                        {"error": "Internal server error", "message": str(e)},
                    )

                self._send_json(response.status, response.payload)

            def log_message(self, format: str, *args: Any) -> None:
                log.info("%s - %s", self.address_string(), format % args)

        return Handler


__all__ = ["StreamApiServer", "build_routes"]
