"""
placesapi/models/country.py

Country and city records. A city is an opaque generated payload;
only its name is validated.
"""

from typing import Any, List
from pydantic import BaseModel, ConfigDict, Field, field_validator


class CityRecord(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = Field(min_length=1)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be blank")
        return value


class CountryRecord(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = ""
    cities: List[Any] = Field(default_factory=list)

    @field_validator("cities", mode="before")
    @classmethod
    def cities_list(cls, value):
        return value if isinstance(value, list) else []


class CountryMatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    file: str
    country: str


class CityResolution(BaseModel):
    model_config = ConfigDict(frozen=True)

    created: bool
    city: str
    country: str
    file: str
