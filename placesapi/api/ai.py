"""AI city guide API (premium plans)."""

from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from placesapi.api.deps import get_completion_client
from placesapi.core.auth import Session
from placesapi.features.ai.client import JsonCompletionClient
from placesapi.features.ai.service import ask_guide, personalized_guide
from placesapi.features.entitlements.service import AI_GUIDE, requires_plan

router = APIRouter(prefix="/api/ask", tags=["ai"])

AI_GUIDE_DENIED = "Your plan does not allow using the AI guide."


class AskRequest(BaseModel):
    question: Optional[str] = None


class PersonalizedRequest(BaseModel):
    city: Optional[str] = None
    interests: Any = None


@router.post("")
def ask_endpoint(
    body: AskRequest,
    session: Session = Depends(requires_plan(AI_GUIDE, AI_GUIDE_DENIED)),
    client: JsonCompletionClient = Depends(get_completion_client),
):
    return ask_guide(client, body.question)


@router.post("/personalized")
def personalized_endpoint(
    body: PersonalizedRequest,
    session: Session = Depends(requires_plan(AI_GUIDE, AI_GUIDE_DENIED)),
    client: JsonCompletionClient = Depends(get_completion_client),
):
    return personalized_guide(client, body.city, body.interests)
