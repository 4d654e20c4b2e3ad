from typing import Any, Dict

from shared.config.system import WidgetConfig


def player_embeds(widget: WidgetConfig) -> Dict[str, Dict[str, Any]]:
    """Embed options for the live and archive players, keyed by panel."""
    common = {"layout": "video", "width": "100%", "height": "100%"}
    return {
        "live": {"channel": widget.channel, **common},
        "archive": {"video": widget.archive_video_id, **common},
    }
