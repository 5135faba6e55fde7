import threading
from typing import Dict, Optional

from cityfix.utils.geocoding import coordinate_key


class GeocodeCache:
    """
    Place-name cache keyed by coordinates quantized to `precision` decimals.

    Lives as long as its owning gateway; entries never expire. Every
    operation is a single locked get/set/delete of one key, so concurrent
    lookups can race to fill a key but never corrupt the cache.
    """

    def __init__(self, precision: int = 4):
        self.precision = precision
        self._entries: Dict[str, str] = {}
        self._lock = threading.Lock()

    def key_for(self, latitude: float, longitude: float) -> str:
        return coordinate_key(latitude, longitude, self.precision)

    def get(self, latitude: float, longitude: float) -> Optional[str]:
        key = self.key_for(latitude, longitude)
        with self._lock:
            return self._entries.get(key)

    def set(self, latitude: float, longitude: float, name: str) -> None:
        key = self.key_for(latitude, longitude)
        with self._lock:
            self._entries[key] = name

    def delete(self, latitude: float, longitude: float) -> None:
        key = self.key_for(latitude, longitude)
        with self._lock:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
