"""
Persistent key-value stores used by the cache and the recent-searches ledger.
"""
import logging
import os
import re
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

CACHE_BLOB_KEY = "weatherAppCache"
RECENT_SEARCHES_KEY = "recentSearches"


class MemoryStore:
    """Process-local store, mostly for tests and ephemeral sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, name: str) -> Optional[str]:
        return self._data.get(name)

    def set(self, name: str, blob: str) -> None:
        self._data[name] = blob

    def remove(self, name: str) -> None:
        self._data.pop(name, None)


class FileStore:
    """
    Store each blob as ``<directory>/<name>.json``.

    Writes go through a temporary file and ``os.replace`` so a crash never
    leaves a half-written blob behind.
    """

    def __init__(self, directory):
        self.directory = Path(directory)

    def _path(self, name: str) -> Path:
        safe_name = re.sub(r"[^A-Za-z0-9_.-]", "_", name)
        return self.directory / f"{safe_name}.json"

    def get(self, name: str) -> Optional[str]:
        path = self._path(name)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            logger.warning(f"Storage blob {name} is not valid UTF-8, ignoring: {e}")
            return None
        except OSError as e:
            logger.warning(f"Storage read failed for {name}: {e}")
            return None

    def set(self, name: str, blob: str) -> None:
        path = self._path(name)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_suffix(".json.tmp")
            tmp_path.write_text(blob, encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as e:
            # Persistence is best-effort
            logger.error(f"Storage write failed for {name}: {e}")

    def remove(self, name: str) -> None:
        try:
            self._path(name).unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Storage remove failed for {name}: {e}")
