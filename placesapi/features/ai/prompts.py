"""Prompt templates for the city-guide generator."""

CITY_SCHEMA = """{
  "name": "",
  "interests": {
    "Art & Culture": [{ "name": "", "map_link": "", "description": "" }],
    "Photo Spots": [{ "name": "", "map_link": "", "description": "" }],
    "Food & Nightlife": [{ "name": "", "map_link": "", "description": "" }],
    "Nature & Relaxation": [{ "name": "", "map_link": "", "description": "" }]
  },
  "local_food_tip": "",
  "full_day": { "Morning": "", "Afternoon": "", "Sunset": "", "Night": "" },
  "seasons": {
    "spring": { "main_event": "", "description": "", "ideas": [{ "name": "", "map_link": "", "description": "" }] },
    "summer": { "main_event": "", "description": "", "ideas": [{ "name": "", "map_link": "", "description": "" }] },
    "autumn": { "main_event": "", "description": "", "ideas": [{ "name": "", "map_link": "", "description": "" }] },
    "winter": { "main_event": "", "description": "", "ideas": [{ "name": "", "map_link": "", "description": "" }] }
  },
  "public_transport_tips": [{ "tip": "", "link": "" }],
  "city_events": [{ "name": "", "season": "", "description": "", "website": "", "dates": "" }],
  "places": [{ "name": "", "map_link": "", "description": "" }],
  "hidden_gems": [{ "name": "", "map_link": "", "description": "" }]
}"""

BASE_PROMPT = "You are City Tour Guide AI. Reply with JSON only (no markdown/comments)."

CITY_RECORD_PROMPT = """{base}
City: {city}
Country: {country}

Schema:
{schema}

Rules: interests is an object; use Google Maps search URLs; keep descriptions concise; full_day may include short <a> links and emojis.
"""

GUIDE_PROMPT = """{base}

Schema:
{schema}

Rules: interests is an object; use realistic well-known locations; Google Maps search URLs; concise descriptions; full_day may include short <a> links and emojis.
"""

PERSONALIZED_PROMPT = """{base}
Create a personalized schedule for the given city and interests with meals included.

Schema:
{{
  "city": "",
  "interests": "",
  "itinerary": [
    {{ "time": "09:00", "title": "", "type": "breakfast|visit|lunch|dinner|break|activity", "description": "", "map_link": "" }}
  ],
  "tips": [{{ "tip": "", "map_link": "" }}]
}}

Rules: include breakfast/lunch/dinner entries; use realistic locations tied to interests; Google Maps search URLs; concise factual descriptions; no emojis.
"""


def city_record_prompt(city: str, country: str) -> str:
    return CITY_RECORD_PROMPT.format(base=BASE_PROMPT, city=city, country=country, schema=CITY_SCHEMA)


def guide_prompt() -> str:
    return GUIDE_PROMPT.format(base=BASE_PROMPT, schema=CITY_SCHEMA)


def personalized_prompt() -> str:
    return PERSONALIZED_PROMPT.format(base=BASE_PROMPT)
