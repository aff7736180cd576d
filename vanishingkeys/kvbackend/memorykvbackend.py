import copy
import threading
from typing import Optional

from vanishingkeys.kvbackend.kvbackend import BaseKeyValueBackend


class MemoryKeyValueBackend(BaseKeyValueBackend):
    """
    In-process backend for local runs and tests.

    Every operation holds a lock, so conditional writes are atomic like in a
    managed store. Reads never reap expired items; call reap_expired() to
    simulate the background reaper.
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.items: dict[str, dict] = {}
        self._lock = threading.Lock()
        self.logger.info("Using in-memory key-value backend")

    def put_if_absent(self, key: str, item: dict) -> bool:
        with self._lock:
            if key in self.items:
                return False
            self.items[key] = copy.deepcopy(item)
            return True

    def get(self, key: str) -> Optional[dict]:
        with self._lock:
            item = self.items.get(key)
            return copy.deepcopy(item) if item is not None else None

    def update_if_exists(
        self, key: str, updates: dict, require_unset: Optional[str] = None
    ) -> Optional[dict]:
        with self._lock:
            item = self.items.get(key)
            if item is None:
                return None
            if require_unset and item.get(require_unset) is not None:
                return None
            item.update(copy.deepcopy(updates))
            return copy.deepcopy(item)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self.items.pop(key, None) is not None

    def reap_expired(self, now_epoch_seconds: int) -> list[str]:
        """Physically remove items whose TTL is in the past. Returns the removed keys."""
        with self._lock:
            expired = [
                key
                for key, item in self.items.items()
                if item.get(self.ttl_attribute) is not None
                and item[self.ttl_attribute] < now_epoch_seconds
            ]
            for key in expired:
                del self.items[key]
        if expired:
            self.logger.debug("Reaped expired items", extra={"count": len(expired)})
        return expired
