"""
Runtime configuration loader.

All settings come from environment variables (a local `.env` is loaded by
the entrypoints through python-dotenv). Invalid values are logged and
replaced by defaults; nothing here is fatal.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from shared.logging.logger import get_logger

log = get_logger("shared.config.system")

# Public client id shipped with the original page. It works for the legacy
# endpoint only and should be overridden in any real deployment.
DEFAULT_TWITCH_CLIENT_ID = "yfn3fr0zxn89nxjv45h3x59oy4wq9"

STATUS_SOURCES = ("proxy", "direct", "static")


@dataclass
class TwitchCredentials:
    client_id: str = DEFAULT_TWITCH_CLIENT_ID
    access_token: str = ""

    @property
    def uses_default_client_id(self) -> bool:
        return self.client_id == DEFAULT_TWITCH_CLIENT_ID

    @property
    def has_access_token(self) -> bool:
        return bool(self.access_token)


@dataclass
class ProxyConfig:
    host: str = "0.0.0.0"
    port: int = 3000
    upstream_timeout: float = 10.0
    allow_origins: List[str] = field(default_factory=lambda: ["*"])


@dataclass
class WidgetConfig:
    channel: str = "nekonekoax"
    archive_video_id: str = "2696596501"
    status_source: str = "proxy"
    proxy_base_url: str = "http://localhost:3000"
    storage_path: str = "shared/state/widget_storage.json"
    # Unset means "derive from the upstream timeout" (see build_status_source).
    proxy_timeout: Optional[float] = None


@dataclass
class RuntimeConfig:
    twitch: TwitchCredentials = field(default_factory=TwitchCredentials)
    proxy: ProxyConfig = field(default_factory=ProxyConfig)
    widget: WidgetConfig = field(default_factory=WidgetConfig)


# ------------------------------------------------------------
# Helpers
# ------------------------------------------------------------

def _get(env: Mapping[str, str], key: str) -> Optional[str]:
    value = env.get(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _int_setting(env: Mapping[str, str], key: str, default: int) -> int:
    raw = _get(env, key)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        log.warning(f"{key} must be an integer (got {raw!r}); using {default}")
        return default
    if not 0 <= value <= 65535:
        log.warning(f"{key} out of range ({value}); using {default}")
        return default
    return value


def _float_setting(
    env: Mapping[str, str], key: str, default: Optional[float]
) -> Optional[float]:
    raw = _get(env, key)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        log.warning(f"{key} must be a number (got {raw!r}); using {default}")
        return default
    if value <= 0:
        log.warning(f"{key} must be positive; using {default}")
        return default
    return value


def _origins_setting(env: Mapping[str, str], key: str) -> List[str]:
    raw = _get(env, key)
    if raw is None:
        return ["*"]
    return [o.strip() for o in raw.split(",") if o.strip()]


def _status_source_setting(env: Mapping[str, str], key: str) -> str:
    raw = _get(env, key)
    if raw is None:
        return WidgetConfig.status_source
    normalized = raw.lower()
    if normalized not in STATUS_SOURCES:
        log.warning(
            f"{key} must be one of {', '.join(STATUS_SOURCES)} (got {raw!r}); "
            f"using {WidgetConfig.status_source}"
        )
        return WidgetConfig.status_source
    return normalized


# ------------------------------------------------------------
# Public API
# ------------------------------------------------------------

def load_runtime_config(env: Optional[Mapping[str, str]] = None) -> RuntimeConfig:
    """
    Build the runtime configuration from `env` (defaults to os.environ).

    Credentials are not validated here; a default client id or an empty
    bearer token only produce warnings and upstream calls that need them
    fail through the normal error path.
    """
    env = env if env is not None else os.environ

    twitch = TwitchCredentials(
        client_id=_get(env, "TWITCH_CLIENT_ID") or DEFAULT_TWITCH_CLIENT_ID,
        access_token=_get(env, "TWITCH_ACCESS_TOKEN") or "",
    )

    proxy = ProxyConfig(
        host=_get(env, "HOST") or ProxyConfig.host,
        port=_int_setting(env, "PORT", ProxyConfig.port),
        upstream_timeout=_float_setting(
            env, "UPSTREAM_TIMEOUT_SECONDS", ProxyConfig.upstream_timeout
        ),
        allow_origins=_origins_setting(env, "ALLOW_ORIGINS"),
    )

    widget = WidgetConfig(
        channel=(_get(env, "TRACKED_CHANNEL") or WidgetConfig.channel).lower(),
        archive_video_id=_get(env, "ARCHIVE_VIDEO_ID") or WidgetConfig.archive_video_id,
        status_source=_status_source_setting(env, "STATUS_SOURCE"),
        proxy_base_url=(
            _get(env, "PROXY_BASE_URL") or WidgetConfig.proxy_base_url
        ).rstrip("/"),
        storage_path=_get(env, "STATUS_CACHE_PATH") or WidgetConfig.storage_path,
        proxy_timeout=_float_setting(env, "PROXY_TIMEOUT_SECONDS", None),
    )

    return RuntimeConfig(twitch=twitch, proxy=proxy, widget=widget)


def warn_insecure_defaults(config: RuntimeConfig) -> List[str]:
    """Log and return warnings for credentials left at their defaults."""

    warnings: List[str] = []
    if config.twitch.uses_default_client_id:
        warnings.append(
            "TWITCH_CLIENT_ID not set; using the built-in public client id"
        )
    if not config.twitch.has_access_token:
        warnings.append(
            "TWITCH_ACCESS_TOKEN not set; Helix calls will be rejected upstream"
        )

    for message in warnings:
        log.warning(message)
    return warnings


__all__ = [
    "DEFAULT_TWITCH_CLIENT_ID",
    "STATUS_SOURCES",
    "TwitchCredentials",
    "ProxyConfig",
    "WidgetConfig",
    "RuntimeConfig",
    "load_runtime_config",
    "warn_insecure_defaults",
]
