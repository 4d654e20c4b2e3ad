"""
======================================================================
 StreamStatus Runtime — Version v0.3.0 (Build 2026.10)
======================================================================

Configuration validation script.

Checks the environment (and a local .env, if present) against what the
proxy and the widget resolver expect, and prints the effective settings.

Design rules:
- No runtime startup
- Validation only (no mutation)
- Stricter than the loader: values the loader would silently replace with
  defaults are reported as errors here
"""

from __future__ import annotations

import os
import sys
from typing import List, Mapping

from dotenv import load_dotenv

from shared.config.system import STATUS_SOURCES, load_runtime_config, warn_insecure_defaults


# ------------------------------------------------------------
# Helpers
# ------------------------------------------------------------

def _error(msg: str):
    print(f"[CONFIG ERROR] {msg}", file=sys.stderr)


def _warn(msg: str):
    print(f"[CONFIG WARNING] {msg}", file=sys.stderr)


# ------------------------------------------------------------
# Validators
# ------------------------------------------------------------

def validate_environment(env: Mapping[str, str]) -> List[str]:
    """Return a list of problems with the raw environment values."""

    problems: List[str] = []

    port = (env.get("PORT") or "").strip()
    if port:
        if not port.isdigit() or not 0 <= int(port) <= 65535:
            problems.append(f"PORT must be an integer between 0 and 65535 (got {port!r})")

    for key in ("UPSTREAM_TIMEOUT_SECONDS", "PROXY_TIMEOUT_SECONDS"):
        timeout = (env.get(key) or "").strip()
        if not timeout:
            continue
        try:
            if float(timeout) <= 0:
                problems.append(f"{key} must be positive")
        except ValueError:
            problems.append(f"{key} must be a number (got {timeout!r})")

    source = (env.get("STATUS_SOURCE") or "").strip().lower()
    if source and source not in STATUS_SOURCES:
        problems.append(
            f"STATUS_SOURCE must be one of {', '.join(STATUS_SOURCES)} (got {source!r})"
        )

    base_url = (env.get("PROXY_BASE_URL") or "").strip()
    if base_url and not base_url.startswith(("http://", "https://")):
        problems.append(f"PROXY_BASE_URL must be an http(s) URL (got {base_url!r})")

    return problems


# ------------------------------------------------------------
# Entry point
# ------------------------------------------------------------

def main() -> int:
    load_dotenv()

    problems = validate_environment(os.environ)
    for problem in problems:
        _error(problem)

    config = load_runtime_config()
    for warning in warn_insecure_defaults(config):
        _warn(warning)

    print(f"Proxy:   http://{config.proxy.host}:{config.proxy.port}")
    print(f"Timeout: {config.proxy.upstream_timeout}s")
    print(f"Origins: {', '.join(config.proxy.allow_origins) or '(none)'}")
    print(f"Channel: {config.widget.channel}")
    print(f"Source:  {config.widget.status_source}")

    if problems:
        print("Configuration validation failed.", file=sys.stderr)
        return 1

    print("Configuration validation passed.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
