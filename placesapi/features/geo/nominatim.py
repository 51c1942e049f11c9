"""
Nominatim geocoding client (forward search + reverse lookup).

An empty result means "unresolvable" and is returned as None;
network failures, timeouts and non-2xx answers raise
UpstreamUnavailableError.
"""
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from placesapi.core.config import settings
from placesapi.core.errors import UpstreamUnavailableError
from placesapi.features.geo.cache import GeoCache, InMemoryGeoCache, geo_key

logger = logging.getLogger("placesapi")

# Address components tried in order when naming the place of a result
CITY_FIELDS = ("city", "town", "village", "municipality", "county")


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lon: float


def _finite_float(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def city_from_address(address: Dict[str, Any]) -> str:
    for field in CITY_FIELDS:
        value = address.get(field)
        if value:
            return value
    return ""


class NominatimGeocoder:
    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        cache: Optional[GeoCache] = None,
        http: Optional[httpx.Client] = None,
    ):
        self.base_url = (base_url or settings.GEOCODER_BASE_URL).rstrip("/")
        self.cache = cache if cache is not None else InMemoryGeoCache()
        self._http = http or httpx.Client(
            timeout=timeout or settings.UPSTREAM_TIMEOUT_SECONDS,
            headers={
                "User-Agent": user_agent or settings.GEOCODER_USER_AGENT,
                "Accept-Language": "en",
            },
        )

    def _get(self, path: str, params: Dict[str, str]) -> Any:
        try:
            response = self._http.get(f"{self.base_url}{path}", params=params)
        except httpx.TimeoutException:
            logger.warning("geocoder.timeout", extra={"path": path})
            raise UpstreamUnavailableError("Geocoding service timed out")
        except httpx.HTTPError as e:
            logger.warning(f"geocoder.error: {type(e).__name__}", extra={"path": path})
            raise UpstreamUnavailableError("Failed to resolve location.")

        if response.status_code >= 400:
            logger.warning("geocoder.status", extra={"path": path, "status": response.status_code})
            raise UpstreamUnavailableError("Failed to resolve location.")

        try:
            return response.json()
        except ValueError:
            raise UpstreamUnavailableError("Failed to resolve location.")

    def search(self, city: str, country: Optional[str] = None, *, address_details: bool = True) -> Optional[Dict[str, Any]]:
        """First-ranked search hit for a city, or None."""
        params = {"format": "jsonv2", "limit": "1", "city": city}
        if country:
            params["country"] = country
        if address_details:
            params["addressdetails"] = "1"

        data = self._get("/search", params)
        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            return None
        return data[0]

    def coordinates(self, city: str, country: Optional[str] = None) -> Optional[Coordinates]:
        """Cached forward geocode of a city; misses are not cached."""
        key = geo_key(city, country)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        entry = self.search(city, country, address_details=False)
        if entry is None:
            return None

        lat = _finite_float(entry.get("lat"))
        lon = _finite_float(entry.get("lon"))
        if lat is None or lon is None:
            return None

        result = Coordinates(lat=lat, lon=lon)
        self.cache.set(key, result)
        return result

    def country_for_city(self, city: str) -> Optional[str]:
        entry = self.search(city)
        if entry is None:
            return None
        address = entry.get("address") or {}
        return address.get("country") or None

    def reverse(self, lat: float, lon: float) -> Optional[Dict[str, Any]]:
        """Address components for a coordinate, or None."""
        data = self._get(
            "/reverse",
            {
                "format": "jsonv2",
                "lat": str(lat),
                "lon": str(lon),
                "zoom": "10",
                "addressdetails": "1",
            },
        )
        if not isinstance(data, dict):
            return None
        address = data.get("address")
        return address if isinstance(address, dict) else None

    def close(self) -> None:
        self._http.close()
