"""Online/offline signal polled before each analysis."""

import logging
import threading
from typing import Protocol

logger = logging.getLogger(__name__)


class Connectivity(Protocol):
    @property
    def is_connected(self) -> bool: ...


class ConnectivityMonitor:
    """
    Holds the latest reachability state reported by the host platform.

    Starts online; the host calls set_connected() from its network
    path-change notifications.
    """

    def __init__(self, connected: bool = True):
        self._connected = connected
        self._lock = threading.Lock()

    @property
    def is_connected(self) -> bool:
        with self._lock:
            return self._connected

    def set_connected(self, connected: bool) -> None:
        with self._lock:
            changed = connected != self._connected
            self._connected = connected
        if changed:
            logger.info("Connectivity changed: %s", "online" if connected else "offline")
