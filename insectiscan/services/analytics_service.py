"""
Usage analytics for analyses.

Counts events in memory and logs them with PII-free metadata. The host can
read the counters (e.g. to forward them to its analytics backend).
"""

import logging
import threading
from collections import Counter
from enum import Enum
from typing import Any, Optional

logger = logging.getLogger(__name__)


class AnalyticsEvent(str, Enum):
    SCAN_STARTED = "scan_started"
    SCAN_COMPLETED = "scan_completed"
    CACHE_HIT = "cache_hit"
    OFFLINE_FALLBACK = "offline_fallback"
    ERROR_OCCURRED = "error_occurred"
    EMERGENCY_CARE_ADVISED = "emergency_care_advised"


# Never forwarded, even if a caller passes them
PII_KEYS = frozenset(
    {"user_id", "location_string", "notes", "profile", "latitude", "longitude"}
)


class AnalyticsService:
    """Thread-safe event counters."""

    def __init__(self):
        self._counts: Counter = Counter()
        self._lock = threading.Lock()

    def log_event(
        self, event: AnalyticsEvent, metadata: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        """
        Record an event.

        Args:
            event: Event type
            metadata: Extra fields; PII keys are dropped

        Returns:
            The metadata actually recorded
        """
        safe_metadata = {
            key: value
            for key, value in (metadata or {}).items()
            if key not in PII_KEYS
        }
        with self._lock:
            self._counts[event] += 1

        logger.info("Analytics event: %s %s", event.value, safe_metadata)
        return safe_metadata

    def count(self, event: AnalyticsEvent) -> int:
        with self._lock:
            return self._counts[event]

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return {event.value: count for event, count in self._counts.items()}

    def reset(self) -> None:
        with self._lock:
            self._counts.clear()
