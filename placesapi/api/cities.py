"""
Country and city routes.

- GET  /api/countries                 list country files
- GET  /api/countries/{file}          one country record
- POST /api/countries/{file}/cities   resolve or generate a city in a file
- POST /api/cities/generate           resolve country, then resolve or generate
- POST /api/city/add                  older client alias of /api/cities/generate
"""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from placesapi.api.deps import get_city_generator, get_country_store, get_geocoder
from placesapi.core.auth import Session
from placesapi.features.cities.generator import CityGenerator
from placesapi.features.cities.service import generate_city, resolve_or_generate
from placesapi.features.countries.service import list_countries, load_country_document
from placesapi.features.entitlements.service import ADD_CITY, requires_plan
from placesapi.features.geo.nominatim import NominatimGeocoder
from placesapi.features.storage.store import RecordStore

router = APIRouter(prefix="/api", tags=["cities"])

ADD_CITY_DENIED = "Your plan does not allow adding new cities."


class CityRequest(BaseModel):
    city: Optional[str] = None
    country: Optional[str] = None


@router.get("/countries")
def get_countries(store: RecordStore = Depends(get_country_store)):
    countries = list_countries(store)
    return {"countries": [{"name": entry.country, "file": entry.file} for entry in countries]}


@router.get("/countries/{file}")
def get_country(file: str, store: RecordStore = Depends(get_country_store)):
    return load_country_document(store, file)


@router.post("/countries/{file}/cities")
def add_city_to_country(
    file: str,
    body: CityRequest,
    session: Session = Depends(requires_plan(ADD_CITY, ADD_CITY_DENIED)),
    store: RecordStore = Depends(get_country_store),
    generator: CityGenerator = Depends(get_city_generator),
):
    result = resolve_or_generate(store, generator, file, body.city, body.country)
    return result.model_dump()


@router.post("/cities/generate")
def generate_city_endpoint(
    body: CityRequest,
    session: Session = Depends(requires_plan(ADD_CITY, ADD_CITY_DENIED)),
    store: RecordStore = Depends(get_country_store),
    generator: CityGenerator = Depends(get_city_generator),
    geocoder: NominatimGeocoder = Depends(get_geocoder),
):
    result = generate_city(store, generator, geocoder, body.city, body.country)
    return result.model_dump()


router.add_api_route("/city/add", generate_city_endpoint, methods=["POST"], include_in_schema=False)
