"""
======================================================================
 StreamStatus Runtime — Version v0.3.0 (Build 2026.10)
======================================================================

Resolve the widget state for a channel once and print it.

Usage:
    python -m scripts.check_stream --channel nekonekoax
    python -m scripts.check_stream --source direct --storage memory
    python -m scripts.check_stream --videos
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from dotenv import load_dotenv

from services.stream_api.server import build_routes
from services.stream_widget.cache import StreamStatusCache
from services.stream_widget.embeds import player_embeds
from services.stream_widget.sources import build_status_source
from shared.config.system import STATUS_SOURCES, RuntimeConfig, load_runtime_config
from shared.logging.logger import get_logger
from shared.platforms.state import render_display
from shared.storage.kv import JsonFileStore, KeyValueStore, MemoryStore

log = get_logger("scripts.check_stream", runtime="widget")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Resolve live/archive state for a channel")
    parser.add_argument("--channel", help="Channel login (default: TRACKED_CHANNEL)")
    parser.add_argument(
        "--source",
        choices=STATUS_SOURCES,
        help="Status source override (default: STATUS_SOURCE)",
    )
    parser.add_argument(
        "--storage",
        choices=("file", "memory"),
        default="file",
        help="Cache storage backend (default: file at STATUS_CACHE_PATH)",
    )
    parser.add_argument(
        "--videos",
        action="store_true",
        help="Print recent videos instead of the widget state",
    )
    return parser.parse_args(argv)


def _store_for(args: argparse.Namespace, config: RuntimeConfig) -> KeyValueStore:
    if args.storage == "memory":
        return MemoryStore()
    return JsonFileStore(config.widget.storage_path)


async def _run(args: argparse.Namespace, config: RuntimeConfig) -> int:
    channel = (args.channel or config.widget.channel).lower()

    if args.videos:
        response = await build_routes(config).recent_videos(channel)
        print(json.dumps(response.payload, indent=2, ensure_ascii=False))
        return 0 if response.status == 200 else 1

    if args.source:
        config.widget.status_source = args.source

    cache = StreamStatusCache(
        _store_for(args, config),
        build_status_source(config),
        channel=channel,
    )
    state = await cache.resolve_status()
    panels = render_display(state)

    embed = player_embeds(config.widget)["live" if state.is_live else "archive"]
    print(json.dumps(
        {"channel": channel, "state": state.value, "panels": panels.to_dict(), "player": embed},
        indent=2,
        ensure_ascii=False,
    ))
    return 0


def main(argv=None) -> int:
    load_dotenv()
    args = parse_args(argv)
    config = load_runtime_config()
    return asyncio.run(_run(args, config))


if __name__ == "__main__":
    sys.exit(main())
