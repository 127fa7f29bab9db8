"""
In-memory, process-lifetime profile cache.

Two maps are kept: normalized username -> UUID, and UUID -> GameProfile.
Entries never expire; ``max_entries`` optionally bounds each map with
least-recently-used eviction.
"""

import threading
import uuid
from collections import OrderedDict
from typing import Dict, Hashable, Optional

from .profile import GameProfile


def normalize_username(username: str) -> str:
    """Usernames are case-insensitive on the identity service."""
    return username.strip().lower()


class _LRUMap:
    def __init__(self, max_entries: int = 0):
        self.max_entries = max_entries
        self._data: "OrderedDict[Hashable, object]" = OrderedDict()

    def get(self, key):
        value = self._data.get(key)
        if value is not None:
            self._data.move_to_end(key)
        return value

    def put(self, key, value):
        self._data[key] = value
        self._data.move_to_end(key)
        if self.max_entries > 0:
            while len(self._data) > self.max_entries:
                self._data.popitem(last=False)

    def clear(self):
        self._data.clear()

    def __len__(self):
        return len(self._data)


class ProfileCache:
    """
    Thread-safe memo of successful remote resolutions.

    Concurrent fetches for the same key are not deduplicated; the last
    write wins.
    """

    def __init__(self, max_entries: int = 0):
        """
        Args:
            max_entries: Per-map size bound (0 = unbounded)
        """
        self._lock = threading.Lock()
        self._profiles = _LRUMap(max_entries)
        self._names = _LRUMap(max_entries)

    def get_profile(self, profile_id: uuid.UUID) -> Optional[GameProfile]:
        with self._lock:
            return self._profiles.get(profile_id)

    def put_profile(self, profile: GameProfile):
        with self._lock:
            self._profiles.put(profile.id, profile)

    def get_uuid(self, username: str) -> Optional[uuid.UUID]:
        with self._lock:
            return self._names.get(normalize_username(username))

    def put_uuid(self, username: str, profile_id: uuid.UUID):
        with self._lock:
            self._names.put(normalize_username(username), profile_id)

    def clear(self):
        """Drop every cached entry."""
        with self._lock:
            self._profiles.clear()
            self._names.clear()

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {"profiles": len(self._profiles), "usernames": len(self._names)}

    def __len__(self) -> int:
        with self._lock:
            return len(self._profiles)
