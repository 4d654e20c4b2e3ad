from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


def isoformat_utc(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a trailing Z."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (
        moment.astimezone(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


class ChannelNotFound(RuntimeError):
    """Raised when a channel login cannot be resolved upstream."""


class VideosUnavailable(RuntimeError):
    """Raised when a resolved channel's video listing cannot be fetched."""


@dataclass
class LookupResult:
    """
    Outcome of a single live-check strategy.

    `ok` is False when the upstream call failed (non-2xx or transport error);
    the next strategy in the chain is tried in that case.
    """

    source: str
    ok: bool
    is_live: bool = False
    status_code: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def failed(
        cls,
        source: str,
        *,
        status_code: Optional[int] = None,
        error: Optional[str] = None,
    ) -> "LookupResult":
        return cls(source=source, ok=False, status_code=status_code, error=error)


@dataclass
class TwitchStreamStatus:
    channel: str
    is_live: bool
    checked_at: datetime
    source: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "channel": self.channel,
            "isLive": self.is_live,
            "timestamp": isoformat_utc(self.checked_at),
        }


@dataclass
class TwitchVideoList:
    """Recent videos for a channel; entries are upstream records, untouched."""

    channel: str
    checked_at: datetime
    videos: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "channel": self.channel,
            "videos": self.videos,
            "timestamp": isoformat_utc(self.checked_at),
        }
