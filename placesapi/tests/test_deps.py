"""Collaborator providers release their connection pools."""

from placesapi.api import deps
from placesapi.core.config import settings
from placesapi.features.ai.client import JsonCompletionClient


class ClosableGroq:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


def test_payment_provider_closed_after_request(monkeypatch):
    monkeypatch.setattr(settings, "PAYPAL_CLIENT_ID", "cid")
    monkeypatch.setattr(settings, "PAYPAL_CLIENT_SECRET", "secret")

    dependency = deps.get_payment_provider()
    provider = next(dependency)
    assert not provider._http.is_closed

    dependency.close()
    assert provider._http.is_closed


def test_completion_client_closed_after_request(monkeypatch):
    groq_client = ClosableGroq()
    monkeypatch.setattr(deps, "JsonCompletionClient", lambda: JsonCompletionClient(client=groq_client))

    dependency = deps.get_completion_client()
    client = next(dependency)
    assert deps.get_city_generator(client).client is client

    dependency.close()
    assert groq_client.closed is True


def test_unused_completion_client_closes_cleanly():
    JsonCompletionClient().close()
