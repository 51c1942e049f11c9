"""
placesapi/models/user.py

Account records as stored in users.json and pending_users.json.
Field aliases keep the on-disk camelCase names.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


def coerce_tokens(value) -> int:
    # Legacy rows may hold null or a non-numeric balance
    if isinstance(value, bool):
        return 0
    try:
        number = int(value)
    except (TypeError, ValueError):
        return 0
    return max(0, number)


class User(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    name: str
    email: str
    password_hash: str = Field(alias="passwordHash")
    plan: str = "free"
    tokens: int = 0

    @field_validator("tokens", mode="before")
    @classmethod
    def tokens_non_negative(cls, value) -> int:
        return coerce_tokens(value)

    def to_record(self) -> dict:
        return self.model_dump(by_alias=True)


class PendingSignup(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    name: str
    email: str
    password_hash: str = Field(alias="passwordHash")
    plan: str = "free"
    token: str
    created_at: Optional[str] = Field(default=None, alias="createdAt")

    def to_record(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_user(self) -> User:
        return User(
            id=self.id,
            name=self.name,
            email=self.email,
            password_hash=self.password_hash,
            plan=self.plan or "free",
            tokens=0,
        )
