"""
Recent-searches ledger: bounded, de-duplicated, most recent first.
"""
import json
import logging
from typing import List

from .storage import RECENT_SEARCHES_KEY

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 5


class RecentSearches:
    def __init__(
        self, store, limit: int = DEFAULT_LIMIT, storage_key: str = RECENT_SEARCHES_KEY
    ):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.limit = limit
        self.storage_key = storage_key
        self._store = store
        self._items: List[str] = self._load()

    @property
    def items(self) -> List[str]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, name: str) -> bool:
        return name in self._items

    def record(self, name: str) -> None:
        """Move ``name`` to the front, dropping older duplicates."""
        if not name or not name.strip():
            return
        self._items = [item for item in self._items if item != name]
        self._items.insert(0, name)
        del self._items[self.limit :]
        self._save()

    def remove(self, name: str) -> None:
        self._items = [item for item in self._items if item != name]
        self._save()

    def clear(self) -> None:
        self._items = []
        self._store.remove(self.storage_key)

    def _save(self) -> None:
        self._store.set(self.storage_key, json.dumps(self._items, ensure_ascii=False))

    def _load(self) -> List[str]:
        blob = self._store.get(self.storage_key)
        if not blob:
            return []

        try:
            data = json.loads(blob)
        except ValueError as e:
            logger.warning(f"Recent searches load error: {e}")
            return []

        if not isinstance(data, list):
            logger.warning("Recent searches blob is not a list, ignoring")
            return []

        items: List[str] = []
        for item in data:
            if isinstance(item, str) and item and item not in items:
                items.append(item)
        return items[: self.limit]
