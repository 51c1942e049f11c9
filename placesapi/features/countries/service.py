"""
placesapi/features/countries/service.py

Country record lookup:
- alias table for alternate/historical country names
- name -> country file resolution
- country listing
"""

import json
import logging
from typing import List, Optional

from placesapi.core.errors import NotFoundError
from placesapi.core.normalize import compact_key, fold_name
from placesapi.features.storage.store import RecordStore
from placesapi.models.country import CountryMatch, CountryRecord

logger = logging.getLogger("placesapi")

# compact_key(alternate name) -> name used in the stored country records
COUNTRY_ALIASES = {
    "bosniaandherzegovina": "Bosnia and Herzegowina",
    "cotedivoire": "Cote d'Ivoire",
    "czechia": "Czech Republic",
    "holysee": "Vatican City",
    "macedonia": "North Macedonia",
    "northmacedonia": "North Macedonia",
    "republicofmoldova": "Moldova",
    "republicofturkey": "Turkey (Europe)",
    "russianfederation": "Russia (Europe)",
    "slovakrepublic": "Slovakia",
    "swissconfederation": "Swizerland",
    "turkiye": "Turkey (Europe)",
    "unitedkingdomofgreatbritainandnorthernireland": "United Kingdom",
}


def resolve_country_alias(name: str) -> str:
    return COUNTRY_ALIASES.get(compact_key(name), name)


def _read_country_name(store: RecordStore, file: str) -> Optional[str]:
    try:
        document = store.read(file, None)
    except (OSError, json.JSONDecodeError):
        logger.error(f"Failed to load country file: {file}", extra={"file": file})
        return None
    if not isinstance(document, dict):
        return None
    name = document.get("name")
    return name if isinstance(name, str) and name else None


def find_country_file_by_name(store: RecordStore, country_name: Optional[str]) -> Optional[CountryMatch]:
    """
    Find the country file whose record name matches `country_name`.

    The alias table is applied first. A record matches when its folded
    name or its whitespace-free key equals the target's. First match in
    file-name order wins.
    """
    if not country_name or not country_name.strip():
        return None

    aliased = resolve_country_alias(country_name.strip())
    target_name = fold_name(aliased)
    target_key = compact_key(aliased)

    for file in store.list_names():
        name = _read_country_name(store, file)
        if not name:
            continue
        if fold_name(name) == target_name:
            return CountryMatch(file=file, country=name)
        name_key = compact_key(name)
        if name_key and name_key == target_key:
            return CountryMatch(file=file, country=name)

    return None


def list_countries(store: RecordStore) -> List[CountryMatch]:
    """All readable, named country records sorted by folded name."""
    entries = []
    for file in store.list_names():
        name = _read_country_name(store, file)
        if name:
            entries.append(CountryMatch(file=file, country=name))
    return sorted(entries, key=lambda entry: (fold_name(entry.country), entry.country))


def load_country(store: RecordStore, file: str) -> CountryRecord:
    """
    Load one country record.

    Raises:
        ValidationError: invalid file name or path
        NotFoundError: file missing
    """
    document = store.read(file, None)
    if document is None:
        raise NotFoundError("File not found.")
    return CountryRecord.model_validate(document if isinstance(document, dict) else {})


def load_country_document(store: RecordStore, file: str) -> dict:
    """Raw country document as stored (for clients that want every field)."""
    document = store.read(file, None)
    if document is None:
        raise NotFoundError("File not found.")
    return document
