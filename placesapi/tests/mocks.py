"""In-process stand-ins for the external oracles (LLM, geocoder, PayPal, SMTP)."""
import json
import smtplib
import threading
import time

from placesapi.core.errors import ConfigurationError
from placesapi.features.geo.nominatim import Coordinates
from placesapi.features.payments.provider import OrderCapture, PaymentProviderError


class FakeCityGenerator:
    """Returns a canned city document; counts calls."""

    def __init__(self, payload=None, delay: float = 0.0):
        self.payload = payload
        self.delay = delay
        self.calls = []
        self._lock = threading.Lock()

    def generate(self, city, country):
        with self._lock:
            self.calls.append((city, country))
        if self.delay:
            time.sleep(self.delay)
        if self.payload is not None:
            return self.payload if isinstance(self.payload, str) else json.dumps(self.payload)
        return json.dumps({"name": city, "local_food_tip": f"Eat well in {city}"})


class FakeCompletionClient:
    def __init__(self, content: str = '{"city": "Paris", "places": []}'):
        self.content = content
        self.calls = []

    def complete_json(self, system, user=None, *, max_tokens=1500, temperature=0.4):
        self.calls.append({"system": system, "user": user, "max_tokens": max_tokens})
        return self.content


class FakeGeocoder:
    def __init__(self, countries=None, coordinates=None, address=None):
        self.countries = countries or {}
        self.coords = coordinates or {}
        self.address = address
        self.coordinate_calls = []

    def country_for_city(self, city):
        return self.countries.get(city)

    def coordinates(self, city, country=None):
        self.coordinate_calls.append((city, country))
        value = self.coords.get(city)
        return Coordinates(*value) if value else None

    def search(self, city, country=None, *, address_details=True):
        value = self.coords.get(city)
        if not value:
            return None
        return {
            "lat": str(value[0]),
            "lon": str(value[1]),
            "address": {"city": city, "country": self.countries.get(city, "")},
        }

    def reverse(self, lat, lon):
        return self.address


class FakePaymentProvider:
    """
    Orders keyed by id. Capturing an order twice fails the way PayPal
    does (422 ORDER_ALREADY_CAPTURED).
    """

    def __init__(self, amount="5.00", currency="EUR", status="COMPLETED", payee=None):
        self.amount = amount
        self.currency = currency
        self.status = status
        self.payee = payee
        self.created = []
        self.captured = set()
        self.capture_error = None
        self._lock = threading.Lock()

    def create_order(self, amount, currency):
        order_id = f"ORDER-{len(self.created) + 1}"
        self.created.append((order_id, amount, currency))
        return order_id

    def capture_order(self, order_id):
        if self.capture_error is not None:
            raise self.capture_error
        with self._lock:
            if order_id in self.captured:
                raise PaymentProviderError(
                    "Order already captured.", status_code=422, issue="ORDER_ALREADY_CAPTURED"
                )
            self.captured.add(order_id)
        return OrderCapture(
            order_id=order_id,
            status=self.status,
            amount=self.amount,
            currency=self.currency,
            payee_merchant_id=self.payee,
        )


class FakeMailer:
    def __init__(self, fail: Exception = None, configured: bool = True):
        self.fail = fail
        self.configured = configured
        self.sent = []

    def ensure_configured(self):
        if not self.configured:
            raise ConfigurationError("Email transport is not configured.")

    def send(self, to, subject, text, html=None):
        if self.fail is not None:
            raise self.fail
        self.sent.append({"to": to, "subject": subject, "text": text, "html": html})


def smtp_down():
    return smtplib.SMTPServerDisconnected("connection closed")
