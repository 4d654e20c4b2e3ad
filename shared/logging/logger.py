import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

_LOGGERS: Dict[str, logging.Logger] = {}

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def console_level() -> int:
    """Console threshold from LOG_LEVEL (names or numbers); INFO otherwise."""
    raw = (os.getenv("LOG_LEVEL") or "").strip().upper()
    if not raw:
        return logging.INFO
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else logging.INFO


def log_dir() -> Optional[Path]:
    """
    Directory for per-run log files, or None when file logging is off.

    LOG_DIR unset means ./logs; LOG_DIR set to an empty string disables
    file output (containers that only collect stderr).
    """
    raw = os.getenv("LOG_DIR")
    if raw is not None and not raw.strip():
        return None
    path = Path(raw or "logs")
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_logger(
    name: str,
    *,
    runtime: str = "streamstatus",
) -> logging.Logger:
    """
    Named logger for the proxy or the widget tooling.

    runtime picks the log file prefix (streamstatus for the proxy, widget for
    the status cache and scripts). The console only shows LOG_LEVEL and
    above; the per-run file keeps everything down to DEBUG, which is where
    dropped client connections and lookup fallbacks end up.
    """
    cache_key = f"{runtime}:{name}"
    if cache_key in _LOGGERS:
        return _LOGGERS[cache_key]

    logger = logging.getLogger(cache_key)
    logger.setLevel(logging.DEBUG)
    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setLevel(console_level())
    console.setFormatter(formatter)
    logger.addHandler(console)

    directory = log_dir()
    if directory is not None:
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        file_handler = logging.FileHandler(
            directory / f"{runtime}-{stamp}.log", encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    _LOGGERS[cache_key] = logger
    return logger
