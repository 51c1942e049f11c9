"""Premium AI city guides (free-form question and personalized itinerary)."""

from typing import Any, Optional

from placesapi.core.errors import InvalidGenerationError, ValidationError
from placesapi.core.tracing import start_span
from placesapi.features.ai.client import JsonCompletionClient
from placesapi.features.ai.parsing import parse_json_object
from placesapi.features.ai.prompts import guide_prompt, personalized_prompt


def ask_guide(client: JsonCompletionClient, question: Optional[str]) -> dict:
    """
    Generate a city guide answering `question`.

    Raises:
        ValidationError: empty question
        InvalidGenerationError: model output is not a JSON object
    """
    text = str(question or "").strip()
    if not text:
        raise ValidationError("Question is required.")

    with start_span("ai.ask_guide"):
        raw = client.complete_json(guide_prompt(), text, max_tokens=900)

    guide = parse_json_object(raw)
    if guide is None:
        raise InvalidGenerationError("Backend error while generating city guide.")
    return guide


def personalized_guide(client: JsonCompletionClient, city: Optional[str], interests: Any) -> dict:
    trimmed_city = str(city or "").strip()
    if isinstance(interests, (list, tuple)):
        interests = ", ".join(str(item).strip() for item in interests if str(item).strip())
    trimmed_interests = str(interests or "").strip()
    if not trimmed_city or not trimmed_interests:
        raise ValidationError("City and interests are required.")

    with start_span("ai.personalized_guide", {"city": trimmed_city}):
        raw = client.complete_json(
            personalized_prompt(),
            f"City: {trimmed_city}\nInterests: {trimmed_interests}",
            max_tokens=1500,
        )

    guide = parse_json_object(raw)
    if guide is None:
        raise InvalidGenerationError("Backend error while generating personalized city guide.")
    return guide
