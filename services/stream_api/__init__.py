"""Read-only proxy in front of the Twitch API."""

from .routes import ApiResponse, StreamApiRoutes
from .server import StreamApiServer, build_routes

__all__ = ["ApiResponse", "StreamApiRoutes", "StreamApiServer", "build_routes"]
