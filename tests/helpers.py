"""Shared test doubles and constants."""

import threading
from typing import List, Optional

# 2024-06-01T00:00:00Z
NOW_MS = 1717200000000
HOUR_MS = 60 * 60 * 1000


class RecordingGateway:
    """GeocodingGateway stand-in that names points and records lookups."""

    def __init__(self, fail_for: Optional[set] = None, events: Optional[list] = None):
        self.fail_for = fail_for or set()
        self.events = events if events is not None else []
        self.calls: List[tuple] = []
        self._lock = threading.Lock()

    def resolve(self, latitude: float, longitude: float) -> str:
        with self._lock:
            self.calls.append((latitude, longitude))
            self.events.append(("lookup", latitude))
        if latitude in self.fail_for:
            raise RuntimeError("provider chain blew up")
        return f"Place {latitude:.2f},{longitude:.2f}"
