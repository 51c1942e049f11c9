import pytest

from placesapi.core.errors import InvalidGenerationError, ValidationError
from placesapi.features.ai.parsing import parse_json_object
from placesapi.features.ai.service import ask_guide, personalized_guide
from placesapi.tests.mocks import FakeCompletionClient


def _premium(plan="premium"):
    return {"id": "u_p", "email": "p@example.com", "plan": plan}


def test_ask_guide_returns_object():
    client = FakeCompletionClient('{"city": "Rome", "places": [{"name": "Colosseum"}]}')
    assert ask_guide(client, "  What to see in Rome? ")["city"] == "Rome"
    assert client.calls[0]["user"] == "What to see in Rome?"
    assert client.calls[0]["max_tokens"] == 900


def test_ask_guide_validation():
    with pytest.raises(ValidationError):
        ask_guide(FakeCompletionClient(), "   ")
    with pytest.raises(InvalidGenerationError):
        ask_guide(FakeCompletionClient("[]"), "Rome?")


def test_personalized_guide_accepts_list_interests():
    client = FakeCompletionClient('{"itinerary": []}')
    assert personalized_guide(client, "Rome", ["food", " art "]) == {"itinerary": []}
    assert client.calls[0]["user"] == "City: Rome\nInterests: food, art"

    with pytest.raises(ValidationError):
        personalized_guide(client, "Rome", [])


@pytest.mark.parametrize(
    "text,expected",
    [
        ('{"a": 1}', {"a": 1}),
        ('```json\n{"a": 1}\n```', {"a": 1}),
        ("```\n{}\n```", {}),
        ("[1]", None),
        ("nope", None),
        (None, None),
    ],
)
def test_parse_json_object(text, expected):
    assert parse_json_object(text) == expected


def test_ask_endpoint_requires_premium(client, auth_headers, fakes):
    resp = client.post("/api/ask", json={"question": "Rome?"}, headers=auth_headers(_premium("basic")))
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Your plan does not allow using the AI guide."
    assert fakes.completion.calls == []


@pytest.mark.parametrize("plan", ["premium", "premium_plus"])
def test_ask_endpoint(client, auth_headers, plan):
    resp = client.post("/api/ask", json={"question": "Paris?"}, headers=auth_headers(_premium(plan)))
    assert resp.status_code == 200
    assert resp.json()["city"] == "Paris"


def test_personalized_endpoint(client, auth_headers):
    resp = client.post(
        "/api/ask/personalized",
        json={"city": "Paris", "interests": ["museums"]},
        headers=auth_headers(_premium()),
    )
    assert resp.status_code == 200

    resp = client.post("/api/ask/personalized", json={"city": "Paris"}, headers=auth_headers(_premium()))
    assert resp.status_code == 400
