"""
Collaborator providers for the routers.

Tests replace these through `app.dependency_overrides`. Providers that
own an HTTP connection pool are yield dependencies and close it once
the response is sent.
"""
import os
from functools import lru_cache
from typing import Generator

from fastapi import Depends

from placesapi.core.config import settings
from placesapi.features.ai.client import JsonCompletionClient
from placesapi.features.cities.generator import GroqCityGenerator
from placesapi.features.geo.cache import InMemoryGeoCache
from placesapi.features.geo.nominatim import NominatimGeocoder
from placesapi.features.mail.service import SmtpMailer
from placesapi.features.payments.paypal_provider import PayPalProvider
from placesapi.features.storage.store import RecordStore

# Process-lifetime geocoding cache shared by every geocoder instance
geo_cache = InMemoryGeoCache()


def get_account_store() -> RecordStore:
    return RecordStore(settings.DATA_DIR)


def get_country_store() -> RecordStore:
    return RecordStore(os.path.join(settings.DATA_DIR, "countries"))


def get_completion_client() -> Generator[JsonCompletionClient, None, None]:
    client = JsonCompletionClient()
    try:
        yield client
    finally:
        client.close()


def get_city_generator(client: JsonCompletionClient = Depends(get_completion_client)) -> GroqCityGenerator:
    return GroqCityGenerator(client)


@lru_cache(maxsize=1)
def get_geocoder() -> NominatimGeocoder:
    return NominatimGeocoder(cache=geo_cache)


def get_payment_provider() -> Generator[PayPalProvider, None, None]:
    provider = PayPalProvider()
    try:
        yield provider
    finally:
        provider.close()


def get_mailer() -> SmtpMailer:
    return SmtpMailer()
