"""
Cache implementation for weather data with TTL support and persistence.
"""
import json
import logging
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, List, Optional

from .errors import CacheCorruption
from .storage import CACHE_BLOB_KEY

logger = logging.getLogger(__name__)


class TTLCache:
    """
    Key -> value store with a global time-to-live and optional size bound.

    Entries keep insertion order; when ``max_size`` is reached the oldest
    entry is evicted to make room for a new key. Every ``set`` writes the
    live entries to ``store`` unless ``autoflush`` is off, in which case the
    cache is only marked dirty until ``flush()``.
    """

    def __init__(
        self,
        store,
        ttl_seconds: float = 3600,
        max_size: Optional[int] = None,
        storage_key: str = CACHE_BLOB_KEY,
        autoflush: bool = True,
        clock: Callable[[], float] = time.time,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_size is not None and max_size < 1:
            raise ValueError("max_size must be at least 1")

        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self.storage_key = storage_key
        self.autoflush = autoflush
        self._store = store
        self._clock = clock
        self._cache: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
        self._dirty = False

        self._load()

    @property
    def dirty(self) -> bool:
        return self._dirty

    def __len__(self) -> int:
        return len(self._cache)

    def keys(self) -> List[str]:
        return list(self._cache.keys())

    def _is_expired(self, entry: Dict[str, Any], now: float) -> bool:
        return now - entry["timestamp"] > self.ttl_seconds

    def _live_entry(self, key: str) -> Optional[Dict[str, Any]]:
        entry = self._cache.get(key)
        if entry is None:
            return None

        if self._is_expired(entry, self._clock()):
            del self._cache[key]
            self._dirty = True
            return None

        return entry

    def get(self, key: str, default: Any = None) -> Optional[Any]:
        """Get cached value if not expired, else ``default``."""
        entry = self._live_entry(key)
        if entry is None:
            return default
        return entry["data"]

    def has(self, key: str) -> bool:
        # A stored None still counts as a live entry
        return self._live_entry(key) is not None

    def set(self, key: str, value: Any) -> None:
        """Cache value with current timestamp."""
        if key in self._cache:
            # Overwrite counts as a fresh insertion
            del self._cache[key]
        elif self.max_size is not None and len(self._cache) >= self.max_size:
            oldest_key, _ = self._cache.popitem(last=False)
            logger.debug(f"Cache full, evicted {oldest_key}")

        self._cache[key] = {"data": value, "timestamp": self._clock()}
        self._dirty = True

        if self.autoflush:
            self.flush()

    def clear(self) -> None:
        """Clear all cached data, including the persisted copy."""
        self._cache.clear()
        self._store.remove(self.storage_key)
        self._dirty = False

    def flush(self) -> None:
        """Write all live entries to the store."""
        now = self._clock()
        entries = [
            {"key": key, "value": entry["data"], "timestamp": entry["timestamp"]}
            for key, entry in self._cache.items()
            if not self._is_expired(entry, now)
        ]
        self._store.set(self.storage_key, json.dumps(entries, ensure_ascii=False))
        self._dirty = False

    def _load(self) -> None:
        blob = self._store.get(self.storage_key)
        if not blob:
            return

        try:
            entries = self._decode(blob)
        except CacheCorruption as e:
            logger.warning(f"Cache load error, starting empty: {e}")
            return

        now = self._clock()
        for key, value, timestamp in entries:
            if now - timestamp <= self.ttl_seconds:
                self._cache.pop(key, None)
                self._cache[key] = {"data": value, "timestamp": timestamp}

        # Keep the newest entries if the bound shrank since the last session
        if self.max_size is not None:
            while len(self._cache) > self.max_size:
                self._cache.popitem(last=False)

        logger.debug(f"Loaded {len(self._cache)} cache entries from storage")

    @staticmethod
    def _decode(blob: str) -> List[tuple]:
        try:
            raw = json.loads(blob)
        except (TypeError, ValueError) as e:
            raise CacheCorruption(f"invalid JSON: {e}") from e

        if not isinstance(raw, list):
            raise CacheCorruption("expected a list of entries")

        entries = []
        for item in raw:
            try:
                key = item["key"]
                timestamp = float(item["timestamp"])
                value = item["value"]
            except (KeyError, TypeError, ValueError) as e:
                raise CacheCorruption(f"malformed entry: {item!r}") from e
            if not isinstance(key, str):
                raise CacheCorruption(f"non-string key: {key!r}")
            entries.append((key, value, timestamp))
        return entries
