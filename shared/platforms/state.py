"""Display state definitions for the stream widget.

The widget shows one of two panels:

- LIVE    : the channel is broadcasting; show the live player
- ARCHIVE : anything else; show the archived video

Parsing is tolerant so stored values, proxy payloads and booleans all map
onto the same two states. Anything unrecognized resolves to ARCHIVE so the
page always has something to render.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class DisplayState(Enum):
    LIVE = "live"
    ARCHIVE = "archive"

    @classmethod
    def from_value(
        cls, value: Any, *, default: Optional["DisplayState"] = None
    ) -> "DisplayState":
        if isinstance(value, cls):
            return value

        if isinstance(value, bool):
            return cls.LIVE if value else cls.ARCHIVE

        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if normalized in {member.name.lower(), member.value}:
                    return member

        return default or cls.ARCHIVE

    @property
    def is_live(self) -> bool:
        return self is DisplayState.LIVE


@dataclass(frozen=True)
class DisplayPanels:
    live_visible: bool
    archive_visible: bool
    title: str
    title_color: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "live_visible": self.live_visible,
            "archive_visible": self.archive_visible,
            "title": self.title,
            "title_color": self.title_color,
        }


LIVE_TITLE = "げーむはいしん中！"
LIVE_TITLE_COLOR = "#5568fc"
ARCHIVE_TITLE = "すぎた配信たち"
ARCHIVE_TITLE_COLOR = "#b794f6"


def render_display(state: Any) -> DisplayPanels:
    """Return panel visibility and heading for a display state.

    Accepts anything DisplayState.from_value accepts, including plain
    booleans. Exactly one panel is visible for every input.
    """

    resolved = DisplayState.from_value(state)
    if resolved.is_live:
        return DisplayPanels(
            live_visible=True,
            archive_visible=False,
            title=LIVE_TITLE,
            title_color=LIVE_TITLE_COLOR,
        )

    return DisplayPanels(
        live_visible=False,
        archive_visible=True,
        title=ARCHIVE_TITLE,
        title_color=ARCHIVE_TITLE_COLOR,
    )


__all__ = [
    "DisplayState",
    "DisplayPanels",
    "LIVE_TITLE",
    "LIVE_TITLE_COLOR",
    "ARCHIVE_TITLE",
    "ARCHIVE_TITLE_COLOR",
    "render_display",
]
