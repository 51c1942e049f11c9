"""
Geocoding result cache.

Keys are (city, country) pairs. The in-memory cache lives for the
process; NullGeoCache disables caching (tests, one-off scripts).
"""
import threading
from typing import Any, Dict, Optional, Protocol, Tuple

GeoKey = Tuple[str, str]


class GeoCache(Protocol):
    def get(self, key: GeoKey) -> Optional[Any]:
        ...

    def set(self, key: GeoKey, value: Any) -> None:
        ...


def geo_key(city: str, country: Optional[str] = None) -> GeoKey:
    return (city, country or "")


class InMemoryGeoCache:
    def __init__(self):
        self._entries: Dict[GeoKey, Any] = {}
        self._lock = threading.Lock()

    def get(self, key: GeoKey) -> Optional[Any]:
        with self._lock:
            return self._entries.get(key)

    def set(self, key: GeoKey, value: Any) -> None:
        with self._lock:
            self._entries[key] = value

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class NullGeoCache:
    def get(self, key: GeoKey) -> Optional[Any]:
        return None

    def set(self, key: GeoKey, value: Any) -> None:
        return None
