import json
import logging
import os
import time
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

CACHE_PREFIX = "mysql_viewer_"
DEFAULT_TTL = 30 * 60


class ResponseCache:
    """
    TTL cache for API responses. Entries are stored as {data, timestamp, ttl}
    under a fixed key prefix and evicted lazily when read after expiry.
    When `path` is given the entries are persisted to that JSON file.
    """

    def __init__(
        self,
        prefix: str = CACHE_PREFIX,
        default_ttl: float = DEFAULT_TTL,
        path: Optional[str] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.prefix = prefix
        self.default_ttl = default_ttl
        self.path = path
        self.clock = clock
        self._items: Dict[str, Dict[str, Any]] = self._load()

    def _load(self) -> Dict[str, Dict[str, Any]]:
        if not self.path or not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Discarding unreadable cache file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _flush(self) -> None:
        if not self.path:
            return
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self._items, f, default=str)

    def _expired(self, item: Dict[str, Any]) -> bool:
        return self.clock() - item["timestamp"] > item["ttl"]

    def set(self, key: str, data: Any, ttl: Optional[float] = None) -> None:
        self._items[self.prefix + key] = {
            "data": data,
            "timestamp": self.clock(),
            "ttl": self.default_ttl if ttl is None else ttl,
        }
        self._flush()

    def get(self, key: str) -> Any:
        item = self._items.get(self.prefix + key)
        if item is None:
            return None
        if self._expired(item):
            self.remove(key)
            return None
        return item["data"]

    def remove(self, key: str) -> None:
        if self._items.pop(self.prefix + key, None) is not None:
            self._flush()

    def remove_matching(self, key_prefix: str) -> int:
        doomed = [k for k in self._items if k.startswith(self.prefix + key_prefix)]
        for k in doomed:
            del self._items[k]
        if doomed:
            self._flush()
        return len(doomed)

    def clear(self) -> None:
        self.remove_matching("")

    def stats(self) -> Dict[str, Any]:
        keys = [k for k in self._items if k.startswith(self.prefix)]
        return {
            "count": len(keys),
            "size": sum(len(json.dumps(self._items[k], default=str)) for k in keys),
            "items": [
                {
                    "key": k[len(self.prefix):],
                    "timestamp": self._items[k]["timestamp"],
                    "ttl": self._items[k]["ttl"],
                    "expired": self._expired(self._items[k]),
                }
                for k in keys
            ],
        }
