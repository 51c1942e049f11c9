import httpx
import pytest

from placesapi.core.errors import NotFoundError, UpstreamUnavailableError, ValidationError
from placesapi.features.geo.cache import InMemoryGeoCache, NullGeoCache
from placesapi.features.geo.nominatim import NominatimGeocoder, city_from_address
from placesapi.features.geo.service import haversine_km, locate, nearest_city, parse_coordinates, reverse_lookup
from placesapi.tests.mocks import FakeGeocoder


def _geocoder(handler, cache=None):
    http = httpx.Client(transport=httpx.MockTransport(handler))
    return NominatimGeocoder(base_url="https://geo.test", cache=cache or InMemoryGeoCache(), http=http)


def test_city_from_address_fallback_chain():
    assert city_from_address({"town": "Hallstatt", "county": "Gmunden"}) == "Hallstatt"
    assert city_from_address({"county": "Gmunden"}) == "Gmunden"
    assert city_from_address({}) == ""


def test_coordinates_are_cached_and_misses_are_not():
    calls = []

    def handler(request):
        calls.append(request.url.params["city"])
        if request.url.params["city"] == "Paris":
            return httpx.Response(200, json=[{"lat": "48.85", "lon": "2.35"}])
        return httpx.Response(200, json=[])

    geocoder = _geocoder(handler)
    first = geocoder.coordinates("Paris", "France")
    second = geocoder.coordinates("Paris", "France")
    assert first == second
    assert first.lat == pytest.approx(48.85)

    assert geocoder.coordinates("Atlantis") is None
    assert geocoder.coordinates("Atlantis") is None
    assert calls == ["Paris", "Atlantis", "Atlantis"]


def test_search_sends_country_and_user_agent():
    seen = {}

    def handler(request):
        seen.update(dict(request.url.params))
        seen["ua"] = request.headers.get("user-agent")
        return httpx.Response(200, json=[{"lat": "1", "lon": "2", "address": {"country": "Peru"}}])

    http = httpx.Client(transport=httpx.MockTransport(handler), headers={"User-Agent": "places-test"})
    geocoder = NominatimGeocoder(base_url="https://geo.test", http=http)
    assert geocoder.country_for_city("Cusco") == "Peru"
    assert seen["city"] == "Cusco"
    assert seen["ua"] == "places-test"


@pytest.mark.parametrize(
    "handler",
    [
        lambda request: httpx.Response(500, text="boom"),
        lambda request: httpx.Response(200, text="<html>"),
    ],
)
def test_upstream_failures(handler):
    with pytest.raises(UpstreamUnavailableError):
        _geocoder(handler).search("Paris")


def test_transport_error_is_upstream_unavailable():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(UpstreamUnavailableError):
        _geocoder(handler).reverse(1.0, 2.0)


def test_reverse_lookup():
    def handler(request):
        assert request.url.path == "/reverse"
        return httpx.Response(200, json={"address": {"village": "Giethoorn", "country": "Netherlands"}})

    assert reverse_lookup(_geocoder(handler), "52.7", "6.07") == {"city": "Giethoorn", "country": "Netherlands"}


def test_reverse_lookup_errors():
    with pytest.raises(ValidationError):
        reverse_lookup(FakeGeocoder(), "north", "5")
    with pytest.raises(NotFoundError):
        reverse_lookup(FakeGeocoder(address={"country": "Nowhere"}), 1, 2)


def test_parse_coordinates_rejects_non_finite():
    with pytest.raises(ValidationError):
        parse_coordinates("nan", "1")
    assert parse_coordinates("1.5", 2) == (1.5, 2.0)


def test_locate():
    geocoder = FakeGeocoder(countries={"Porto": "Portugal"}, coordinates={"Porto": (41.15, -8.61)})
    assert locate(geocoder, "Porto") == {"city": "Porto", "country": "Portugal", "lat": 41.15, "lon": -8.61}
    with pytest.raises(NotFoundError):
        locate(geocoder, "Atlantis")
    with pytest.raises(ValidationError):
        locate(geocoder, " ")


def test_nearest_city(country_store, write_country):
    write_country("portugal.json", "Portugal", [{"name": "Lisbon"}, {"name": "Porto"}, {"name": "Nowhere"}])
    geocoder = FakeGeocoder(coordinates={"Lisbon": (38.72, -9.14), "Porto": (41.15, -8.61)})

    assert nearest_city(country_store, geocoder, "portugal.json", 41.0, -8.6) == {"city": "Porto"}
    assert ("Lisbon", "Portugal") in geocoder.coordinate_calls

    with pytest.raises(NotFoundError):
        nearest_city(country_store, FakeGeocoder(), "portugal.json", 41.0, -8.6)


def test_haversine():
    assert haversine_km(0, 0, 0, 0) == 0
    # Paris -> London is roughly 344 km
    assert haversine_km(48.8566, 2.3522, 51.5074, -0.1278) == pytest.approx(344, abs=5)


def test_null_cache_always_refetches():
    calls = []

    def handler(request):
        calls.append(1)
        return httpx.Response(200, json=[{"lat": "1", "lon": "2"}])

    geocoder = _geocoder(handler, cache=NullGeoCache())
    geocoder.coordinates("Paris")
    geocoder.coordinates("Paris")
    assert len(calls) == 2
