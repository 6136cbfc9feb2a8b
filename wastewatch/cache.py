# file: wastewatch/cache.py

import time
from typing import Callable, Dict, Optional, Tuple

from wastewatch.models import AirQualityResponse


def cache_key(city: str, latitude: Optional[float] = None, longitude: Optional[float] = None) -> str:
    """Coordinates win over the city name when both are given."""
    if latitude is not None and longitude is not None:
        return f"{latitude},{longitude}"
    return city.strip().lower()


class ReadingsCache:
    """In-memory TTL cache for air quality responses."""

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic):
        self._ttl = ttl
        self._clock = clock
        self._entries: Dict[str, Tuple[float, AirQualityResponse]] = {}

    def get(self, key: str) -> Optional[AirQualityResponse]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, response = entry
        if self._clock() - stored_at >= self._ttl:
            del self._entries[key]
            return None
        return response

    def set(self, key: str, response: AirQualityResponse) -> None:
        self._entries[key] = (self._clock(), response)

    def __len__(self) -> int:
        return len(self._entries)
