"""
Geocoding proxy routes.

- GET /api/geo/reverse?lat=&lon=         city + country for a coordinate
- GET /api/geo/locate?city=              coordinate + country for a city
- GET /api/geo/nearest?lat=&lon=&file=   closest city of a country file
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from placesapi.api.deps import get_country_store, get_geocoder
from placesapi.features.geo.nominatim import NominatimGeocoder
from placesapi.features.geo.service import locate, nearest_city, reverse_lookup
from placesapi.features.storage.store import RecordStore

router = APIRouter(prefix="/api/geo", tags=["geo"])


@router.get("/reverse")
def reverse_endpoint(
    lat: Optional[str] = Query(None),
    lon: Optional[str] = Query(None),
    geocoder: NominatimGeocoder = Depends(get_geocoder),
):
    return reverse_lookup(geocoder, lat, lon)


@router.get("/locate")
def locate_endpoint(
    city: Optional[str] = Query(None),
    geocoder: NominatimGeocoder = Depends(get_geocoder),
):
    return locate(geocoder, city)


@router.get("/nearest")
def nearest_endpoint(
    lat: Optional[str] = Query(None),
    lon: Optional[str] = Query(None),
    file: Optional[str] = Query(None),
    store: RecordStore = Depends(get_country_store),
    geocoder: NominatimGeocoder = Depends(get_geocoder),
):
    return nearest_city(store, geocoder, file, lat, lon)
