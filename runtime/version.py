"""Runtime version metadata for StreamStatus.

This module is import-safe and exposes authoritative version identifiers for
the proxy server, the widget resolver and the maintenance scripts.
"""

from __future__ import annotations

PROJECT_NAME = "StreamStatus Runtime"
VERSION = "v0.3.0"
BUILD = "2026.10"
LICENSE = "Proprietary"

__all__ = [
    "PROJECT_NAME",
    "VERSION",
    "BUILD",
    "LICENSE",
    "as_dict",
    "as_string",
]


def as_dict() -> dict[str, str]:
    """Return version metadata as a dictionary."""

    return {
        "project": PROJECT_NAME,
        "version": VERSION,
        "build": BUILD,
        "license": LICENSE,
    }


def as_string() -> str:
    """Return a concise version string."""

    return f"{PROJECT_NAME} {VERSION} (Build {BUILD})"
