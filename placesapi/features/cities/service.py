"""
City resolution and lazy generation.

A city is looked up in its country record by city_key (lowercase,
diacritics folded, whitespace collapsed). A missing city is generated
once by the CityGenerator, inserted, and the record re-sorted and
written back. The lookup, the generation and the write all happen under
the country file's lock, so concurrent requests for the same missing
city produce one oracle call and one insert.
"""

import logging
from typing import Optional

from placesapi.core.errors import CorruptRecordError, InvalidGenerationError, NotFoundError, ValidationError
from placesapi.core.normalize import city_key
from placesapi.features.cities.generator import CityGenerator, parse_city_payload
from placesapi.features.countries.service import find_country_file_by_name, load_country
from placesapi.features.geo.nominatim import NominatimGeocoder
from placesapi.features.storage.store import RecordStore
from placesapi.models.country import CityResolution

logger = logging.getLogger("placesapi")


def _entry_key(entry) -> str:
    name = entry.get("name") if isinstance(entry, dict) else None
    return city_key(name if isinstance(name, str) else "")


def _find_entry(cities: list, key: str) -> Optional[dict]:
    for entry in cities:
        if _entry_key(entry) == key:
            return entry
    return None


def sort_cities(cities: list) -> list:
    """Cities ordered by city_key, ties by raw name."""
    return sorted(
        cities,
        key=lambda entry: (_entry_key(entry), str(entry.get("name", "")) if isinstance(entry, dict) else ""),
    )


def find_city(store: RecordStore, country_file: str, city: str) -> Optional[dict]:
    """Existing city record in a country file, or None."""
    key = city_key(city)
    if not key:
        return None
    country = load_country(store, country_file)
    return _find_entry(country.cities, key)


def resolve_or_generate(
    store: RecordStore,
    generator: CityGenerator,
    country_file: str,
    city: Optional[str],
    fallback_country: Optional[str] = None,
) -> CityResolution:
    """
    Return the city from `country_file`, generating and persisting it if missing.

    Raises:
        ValidationError: blank city, invalid file name or path
        NotFoundError: country file missing
        CorruptRecordError: country file is not a city document (nothing written)
        InvalidGenerationError: oracle output unusable (nothing written)
        UpstreamUnavailableError: oracle unreachable (nothing written)
    """
    requested = str(city or "").strip()
    if not requested:
        raise ValidationError("City is required.")
    store.resolve(country_file)
    key = city_key(requested)

    with store.locked(country_file):
        document = store.read(country_file, None)
        if document is None:
            raise NotFoundError("File not found.")
        if not isinstance(document, dict):
            raise CorruptRecordError(f"Country file {country_file} is not a JSON object.")
        cities = document.get("cities")
        if cities is None:
            cities = []
        elif not isinstance(cities, list):
            raise CorruptRecordError(f"Country file {country_file} has a malformed city list.")
        country_name = document.get("name") or ""

        existing = _find_entry(cities, key)
        if existing is not None:
            return CityResolution(created=False, city=existing["name"], country=country_name, file=country_file)

        prompt_country = country_name or (fallback_country or "").strip()
        result = parse_city_payload(generator.generate(requested, prompt_country))
        if not result.ok:
            logger.warning(
                f"city.generation_invalid: {result.error}",
                extra={"city": requested, "file": country_file, "error_code": InvalidGenerationError.code},
            )
            raise InvalidGenerationError("Invalid AI response.")

        generated = dict(result.city)
        if city_key(generated["name"]) != key:
            generated["name"] = requested

        document["cities"] = sort_cities(cities + [generated])
        store.write(country_file, document)

    logger.info(
        "city.generated",
        extra={"city": generated["name"], "country": country_name, "file": country_file},
    )
    return CityResolution(created=True, city=generated["name"], country=country_name, file=country_file)


def generate_city(
    store: RecordStore,
    generator: CityGenerator,
    geocoder: NominatimGeocoder,
    city: Optional[str],
    country: Optional[str] = None,
) -> CityResolution:
    """
    Resolve the country of `city` (geocoding it when not given), then
    resolve or generate the city in that country's file.
    """
    requested = str(city or "").strip()
    if not requested:
        raise ValidationError("City is required.")

    resolved_country = (country or "").strip() or geocoder.country_for_city(requested)
    if not resolved_country:
        raise NotFoundError("Country could not be resolved.")

    match = find_country_file_by_name(store, resolved_country)
    if match is None:
        raise NotFoundError("No data file for resolved country.")

    return resolve_or_generate(store, generator, match.file, requested, match.country)
