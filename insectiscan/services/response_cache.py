"""
In-memory cache of raw model responses keyed by image content.

Entries live for the process lifetime only and expire after the configured
TTL (24 hours by default).
"""

import hashlib
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from insectiscan.config import settings

logger = logging.getLogger(__name__)


def image_digest(*images: bytes) -> str:
    """SHA-256 hex digest over one or more raw images, in order."""
    digest = hashlib.sha256()
    for image in images:
        digest.update(len(image).to_bytes(8, "big"))
        digest.update(image)
    return digest.hexdigest()


@dataclass(frozen=True)
class CacheEntry:
    response: str
    created_at: float

    def is_valid(self, now: float, ttl_seconds: float) -> bool:
        return now - self.created_at < ttl_seconds


class ResponseCache:
    """Thread-safe TTL cache; the only shared mutable state in the core."""

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = (
            ttl_seconds if ttl_seconds is not None else settings.cache_ttl_seconds
        )
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        """Return the cached text, evicting the entry if it has expired."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if not entry.is_valid(now, self.ttl_seconds):
                del self._entries[key]
                logger.info("Evicted expired cache entry %s", key[:16])
                return None
            return entry.response

    def put(self, key: str, response: str) -> None:
        entry = CacheEntry(response=response, created_at=self._clock())
        with self._lock:
            self._entries[key] = entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
