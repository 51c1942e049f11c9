"""
PayPal payment routes.

- POST /api/payments/paypal/create-order: create an order for an allowed amount
- POST /api/payments/paypal/capture-order: capture it and credit the caller
- POST /api/payments/paypal/credit: retired client-side credit hook (410)
"""
from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from placesapi.api.deps import get_account_store, get_payment_provider
from placesapi.core.auth import Session, get_current_session
from placesapi.core.errors import GoneError
from placesapi.features.payments.provider import PaymentProvider
from placesapi.features.payments.service import capture_order, create_order
from placesapi.features.storage.store import RecordStore

router = APIRouter(prefix="/api/payments/paypal", tags=["payments"])


class CreateOrderRequest(BaseModel):
    """Amount in EUR; must be one of the sold amounts."""
    amount: Any = None


class CaptureOrderRequest(BaseModel):
    order_id: Optional[str] = Field(default=None, alias="orderId")


@router.post("/credit")
def legacy_credit(session: Session = Depends(get_current_session)):
    raise GoneError("Legacy PayPal credit endpoint is disabled. Use create-order and capture-order.")


@router.post("/create-order")
def create_order_endpoint(
    body: CreateOrderRequest,
    session: Session = Depends(get_current_session),
    provider: PaymentProvider = Depends(get_payment_provider),
):
    return {"id": create_order(provider, body.amount)}


@router.post("/capture-order")
def capture_order_endpoint(
    body: CaptureOrderRequest,
    session: Session = Depends(get_current_session),
    provider: PaymentProvider = Depends(get_payment_provider),
    store: RecordStore = Depends(get_account_store),
):
    # Credit goes to the authenticated identity, never to anything in the body
    receipt = capture_order(provider, store, body.order_id, session.email)
    return {
        "ok": True,
        "plan": receipt.plan,
        "tokensAdded": receipt.tokens_added,
        "totalTokens": receipt.total_tokens,
        "token": receipt.token,
    }
