"""Key-value persistence for notes and the dark-mode preference.

A backend only has to offer ``get(key) -> bytes | None`` and
``set(key, bytes)``. ``PersistenceAdapter`` sits on top and turns every
read or write failure into a logged, degraded result so callers never see
storage errors.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Protocol, TypeVar

import redis
from pydantic import TypeAdapter

from grilette.metrics import STORAGE_FAILURES
from grilette.models import NOTE_LIST, Note

logger = logging.getLogger("grilette.storage")

NOTES_KEY = "notes"
DARK_MODE_KEY = "isDarkMode"
DEFAULT_REDIS_PREFIX = "grilette:"

_BOOL = TypeAdapter(bool)

T = TypeVar("T")


class KeyValueStore(Protocol):
    """Minimal byte-oriented key-value store."""

    def get(self, key: str) -> Optional[bytes]: ...

    def set(self, key: str, value: bytes) -> None: ...


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------


class MemoryStore:
    """Process-local store, lost on exit."""

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}

    def get(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._data[key] = bytes(value)


class FileStore:
    """Stores each key as ``<data_dir>/<key>.json``."""

    def __init__(self, data_dir: Path) -> None:
        self._dir = Path(data_dir).expanduser()

    @property
    def data_dir(self) -> Path:
        return self._dir

    def path_for(self, key: str) -> Path:
        return self._dir / f"{key}.json"

    def get(self, key: str) -> Optional[bytes]:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_bytes()

    def set(self, key: str, value: bytes) -> None:
        """Replace the file wholesale via a temporary sibling."""
        self._dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        tmp = path.with_name(path.name + ".tmp")
        tmp.write_bytes(value)
        tmp.replace(path)


class RedisStore:
    """Redis-backed store. Handles Redis being unavailable gracefully."""

    def __init__(self, redis_url: str, prefix: str = DEFAULT_REDIS_PREFIX) -> None:
        self._redis_url = redis_url
        self._prefix = prefix
        self._client: Optional[redis.Redis] = None

    @property
    def available(self) -> bool:
        """Whether the Redis connection is active."""
        return self._client is not None

    def connect(self) -> None:
        """Connect to Redis. Non-fatal if Redis is unavailable."""
        try:
            self._client = redis.Redis.from_url(self._redis_url)
            self._client.ping()
            logger.info("Redis store connected: %s", self._redis_url)
        except Exception as e:
            logger.warning("Redis unavailable, notes will not persist: %s", e)
            self._client = None

    def close(self) -> None:
        """Close the Redis connection."""
        if self._client:
            self._client.close()
            self._client = None

    def get(self, key: str) -> Optional[bytes]:
        if not self._client:
            return None
        return self._client.get(self._prefix + key)

    def set(self, key: str, value: bytes) -> None:
        if not self._client:
            logger.warning("Redis unavailable, dropping write for %s", key)
            return
        self._client.set(self._prefix + key, value)


# ---------------------------------------------------------------------------
# Adapter
# ---------------------------------------------------------------------------


class PersistenceAdapter:
    """Reads and writes typed values over a ``KeyValueStore``.

    Reads fall back to a default when the key is missing or its bytes do not
    parse. Writes are fire-and-forget: failures are logged and swallowed.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    @property
    def store(self) -> KeyValueStore:
        return self._store

    def read(self, key: str, adapter: TypeAdapter[T], default: T) -> T:
        """Return the decoded value under ``key`` or ``default``."""
        try:
            raw = self._store.get(key)
        except Exception as e:
            STORAGE_FAILURES.labels(operation="read").inc()
            logger.warning("Failed to read %s: %s", key, e)
            return default
        if raw is None:
            return default
        try:
            return adapter.validate_json(raw)
        except Exception as e:
            STORAGE_FAILURES.labels(operation="read").inc()
            logger.warning("Stored value for %s is unreadable, using default: %s", key, e)
            return default

    def write(self, key: str, adapter: TypeAdapter[T], value: T) -> None:
        """Encode ``value`` and store it under ``key``."""
        try:
            self._store.set(key, adapter.dump_json(value, by_alias=True))
        except Exception as e:
            STORAGE_FAILURES.labels(operation="write").inc()
            logger.warning("Failed to write %s: %s", key, e)

    # ------------------------------------------------------------------
    # Typed accessors
    # ------------------------------------------------------------------

    def read_notes(self) -> list[Note]:
        return self.read(NOTES_KEY, NOTE_LIST, [])

    def write_notes(self, notes: list[Note]) -> None:
        self.write(NOTES_KEY, NOTE_LIST, notes)

    def read_dark_mode(self) -> bool:
        return self.read(DARK_MODE_KEY, _BOOL, False)

    def write_dark_mode(self, value: bool) -> None:
        self.write(DARK_MODE_KEY, _BOOL, value)
