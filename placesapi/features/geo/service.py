"""
Geo helpers behind the /api/geo endpoints.
"""
import math
from typing import Any, Optional

from placesapi.core.errors import NotFoundError, ValidationError
from placesapi.features.countries.service import load_country
from placesapi.features.geo.nominatim import NominatimGeocoder, city_from_address
from placesapi.features.storage.store import RecordStore

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def parse_coordinates(lat: Any, lon: Any) -> tuple:
    try:
        lat_value, lon_value = float(lat), float(lon)
    except (TypeError, ValueError):
        raise ValidationError("Invalid coordinates.")
    if not (math.isfinite(lat_value) and math.isfinite(lon_value)):
        raise ValidationError("Invalid coordinates.")
    return lat_value, lon_value


def reverse_lookup(geocoder: NominatimGeocoder, lat: Any, lon: Any) -> dict:
    lat_value, lon_value = parse_coordinates(lat, lon)
    address = geocoder.reverse(lat_value, lon_value) or {}
    city = city_from_address(address)
    country = address.get("country") or ""
    if not city or not country:
        raise NotFoundError("Location not found.")
    return {"city": city, "country": country}


def locate(geocoder: NominatimGeocoder, city: Optional[str]) -> dict:
    name = str(city or "").strip()
    if not name:
        raise ValidationError("City is required.")

    entry = geocoder.search(name) or {}
    address = entry.get("address") or {}
    try:
        lat, lon = parse_coordinates(entry.get("lat"), entry.get("lon"))
    except ValidationError:
        raise NotFoundError("Location not found.")
    country = address.get("country") or ""
    if not country:
        raise NotFoundError("Location not found.")

    return {"city": city_from_address(address) or name, "country": country, "lat": lat, "lon": lon}


def nearest_city(store: RecordStore, geocoder: NominatimGeocoder, file: str, lat: Any, lon: Any) -> dict:
    """Closest city of a country file to a coordinate (great-circle distance)."""
    lat_value, lon_value = parse_coordinates(lat, lon)
    country = load_country(store, file)

    best_city = None
    best_distance = math.inf
    for entry in country.cities:
        name = entry.get("name") if isinstance(entry, dict) else None
        if not name:
            continue
        coords = geocoder.coordinates(name, country.name or None)
        if coords is None:
            continue
        distance = haversine_km(lat_value, lon_value, coords.lat, coords.lon)
        if distance < best_distance:
            best_distance = distance
            best_city = name

    if best_city is None:
        raise NotFoundError("No nearby city found.")
    return {"city": best_city}
