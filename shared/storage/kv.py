"""
Key-value storage capability for client-side widget state.

The page keeps its state in browser-local storage: a flat mapping of string
keys to string values. This module exposes the same contract so the status
cache and the preference helpers can run against memory (tests), a JSON
file (scripts, long-running resolvers) or a store that refuses every
operation (private browsing).

Every implementation raises StorageUnavailable on failure; callers decide
whether that is a miss or a no-op.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from threading import Lock
from typing import Dict, Optional, Protocol

from shared.logging.logger import get_logger

log = get_logger("shared.storage.kv")


class StorageUnavailable(RuntimeError):
    """Raised when the backing store cannot be read or written."""


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


# ======================================================================
# In-memory
# ======================================================================

class MemoryStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = str(value)

    def snapshot(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._data)


# ======================================================================
# JSON file
# ======================================================================

class JsonFileStore:
    """
    File-backed store holding one JSON object.

    Writes are atomic (temp file + replace) so a crashed writer never leaves
    a truncated document. Concurrent writers are last-write-wins.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._lock = Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self, *, reset_corrupt: bool = False) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except OSError as e:
            raise StorageUnavailable(f"Failed to read {self._path}: {e}") from e
        except ValueError as e:
            if not reset_corrupt:
                raise StorageUnavailable(f"Failed to read {self._path}: {e}") from e
            log.warning(f"{self._path} is not valid JSON, resetting: {e}")
            return {}

        if not isinstance(data, dict):
            log.warning(f"{self._path} root is not an object; ignoring contents")
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _write_atomic(self, payload: Dict[str, str]) -> None:
        serialized = json.dumps(payload, indent=2, ensure_ascii=False)
        self._path.parent.mkdir(parents=True, exist_ok=True)

        with tempfile.NamedTemporaryFile(
            "w", dir=self._path.parent, delete=False, encoding="utf-8"
        ) as tmp:
            tmp.write(serialized)
            tmp.flush()
            os.fsync(tmp.fileno())
            temp_path = Path(tmp.name)

        temp_path.replace(self._path)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._load(reset_corrupt=True)
            data[key] = str(value)
            try:
                self._write_atomic(data)
            except OSError as e:
                raise StorageUnavailable(f"Failed to write {self._path}: {e}") from e


# ======================================================================
# Unavailable
# ======================================================================

class UnavailableStore:
    """Store that rejects every access, like storage in a locked-down browser."""

    def __init__(self, reason: str = "storage disabled") -> None:
        self.reason = reason

    def get(self, key: str) -> Optional[str]:
        raise StorageUnavailable(self.reason)

    def set(self, key: str, value: str) -> None:
        raise StorageUnavailable(self.reason)


__all__ = [
    "StorageUnavailable",
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    "UnavailableStore",
]
