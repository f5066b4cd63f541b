"""In-process read-through cache for user risk profiles"""

import threading
import time
from collections import OrderedDict
from typing import Callable, Optional, Tuple

from fraud_gateway.domain.models import UserRiskProfile


class ProfileCache:
    """
    Thread-safe TTL cache keyed by user id.

    Entries older than ttl_seconds are treated as missing so the caller
    re-reads the authoritative store. The oldest entry is evicted once
    max_entries is reached. Last write wins.
    """

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        max_entries: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._store: "OrderedDict[str, Tuple[UserRiskProfile, float]]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, user_id: str) -> Optional[UserRiskProfile]:
        with self._lock:
            entry = self._store.get(user_id)
            if entry is None:
                return None
            profile, expiry = entry
            if self._clock() > expiry:
                del self._store[user_id]
                return None
            return profile

    def set(self, profile: UserRiskProfile) -> None:
        with self._lock:
            self._store.pop(profile.user_id, None)
            self._store[profile.user_id] = (profile, self._clock() + self._ttl)
            while len(self._store) > self._max_entries:
                self._store.popitem(last=False)

    def invalidate(self, user_id: str) -> None:
        with self._lock:
            self._store.pop(user_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
