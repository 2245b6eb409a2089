"""In-memory response cache with time-based expiry."""

import copy
import time
from typing import Any, Callable, Optional

from loguru import logger

DEFAULT_TTL_SECONDS = 60 * 60


class ResponseCache:
    """Maps request keys to serialized results for ttl_seconds.

    Payloads are deep-copied on the way in and out, so callers never share
    state through the cache.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, dict[str, Any]]] = {}

    def _expired(self, stored_at: float, now: float) -> bool:
        return now - stored_at >= self.ttl_seconds

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        now = self._clock()
        expired = [
            key
            for key, (stored_at, _) in self._entries.items()
            if self._expired(stored_at, now)
        ]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Purged {len(expired)} expired cache entries")
        return len(expired)

    def get(self, key: str) -> Optional[dict[str, Any]]:
        """Return a copy of the cached payload, or None if missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        stored_at, payload = entry
        if self._expired(stored_at, self._clock()):
            del self._entries[key]
            logger.debug(f"Cache entry expired: {key}")
            return None

        return copy.deepcopy(payload)

    def set(self, key: str, payload: dict[str, Any]) -> None:
        self.purge_expired()
        self._entries[key] = (self._clock(), copy.deepcopy(payload))

    def clear(self) -> None:
        self._entries.clear()
        logger.info("Cache cleared")

    def stats(self) -> dict[str, Any]:
        """Live entries only; expired ones are purged first."""
        self.purge_expired()
        return {"size": len(self._entries), "keys": list(self._entries.keys())}
