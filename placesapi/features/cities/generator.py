"""
City record generation.

`CityGenerator` is the oracle seam: it returns raw text for a city.
`parse_city_payload` turns that text into a tagged result; only a JSON
object with a non-blank `name` is accepted.
"""
from dataclasses import dataclass
from typing import Optional, Protocol

from pydantic import ValidationError as SchemaError

from placesapi.features.ai.client import JsonCompletionClient
from placesapi.features.ai.parsing import parse_json_object
from placesapi.features.ai.prompts import city_record_prompt
from placesapi.models.country import CityRecord


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of parsing oracle output: either `city` or `error` is set."""
    city: Optional[dict] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.city is not None


class CityGenerator(Protocol):
    def generate(self, city: str, country: str) -> str:
        """Return raw (untrusted) JSON text describing `city`."""
        ...


class GroqCityGenerator:
    """CityGenerator backed by a JSON-mode Groq completion."""

    def __init__(self, client: Optional[JsonCompletionClient] = None, max_tokens: int = 1500):
        self.client = client or JsonCompletionClient()
        self.max_tokens = max_tokens

    def generate(self, city: str, country: str) -> str:
        return self.client.complete_json(
            city_record_prompt(city, country),
            max_tokens=self.max_tokens,
        )


def parse_city_payload(text: Optional[str]) -> GenerationResult:
    payload = parse_json_object(text)
    if payload is None:
        return GenerationResult(error="response is not a JSON object")

    try:
        record = CityRecord.model_validate(payload)
    except SchemaError:
        return GenerationResult(error="response is missing a city name")

    return GenerationResult(city=record.model_dump())
