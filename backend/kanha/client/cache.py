"""Local key/value persistence for the client, with a freshness window on top."""
import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class LocalStore:
    """
    JSON-file backed key/value store. Writes go through a temp file and rename.
    """

    def __init__(self, path):
        self.path = Path(path)
        self._data = self._load()

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Discarding unreadable cache file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(self._data, f, default=str)
        os.replace(tmp, self.path)

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._save()

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._save()

    def keys(self):
        return list(self._data.keys())


class TimedCache:
    """Entries expire ``ttl`` seconds after they were written."""

    def __init__(self, store: LocalStore, ttl: float, clock: Callable[[], float] = time.time):
        self.store = store
        self.ttl = ttl
        self.clock = clock

    def _key(self, key: str) -> str:
        return f"cache:{key}"

    def get(self, key: str) -> Optional[Any]:
        """Cached value, or None when missing or stale."""
        entry = self.store.get(self._key(key))
        if not entry:
            return None
        if self.clock() - entry.get("stored_at", 0) >= self.ttl:
            return None
        return entry.get("value")

    def set(self, key: str, value: Any) -> None:
        self.store.set(self._key(key), {"stored_at": self.clock(), "value": value})

    def invalidate_prefix(self, prefix: str) -> None:
        for stored in self.store.keys():
            if stored.startswith(self._key(prefix)):
                self.store.remove(stored)
