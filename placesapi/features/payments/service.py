"""
Payment reconciliation.

Turns a provider capture into a plan upgrade:

    CREATED -> CAPTURED -> CREDITED
    CREATED -> REJECTED  (any failed gate, nothing credited)

Only amounts in AMOUNT_ENTITLEMENTS are sold. The credited user is the
authenticated one; the plan is overwritten with the purchased plan and
the tokens are added to the balance.
"""
import logging
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Optional

from placesapi.core.auth import issue_session_token
from placesapi.core.config import settings
from placesapi.core.errors import (
    NotFoundError,
    PaymentRejectedError,
    UpstreamUnavailableError,
    ValidationError,
)
from placesapi.core.logging import log_event
from placesapi.core.normalize import normalize_email
from placesapi.core.tracing import start_span
from placesapi.features.payments.provider import OrderCapture, PaymentProvider, PaymentProviderError
from placesapi.features.storage.store import RecordStore
from placesapi.models.user import User

USERS_FILE = "users.json"

CENT = Decimal("0.01")
_ORDER_ID = re.compile(r"^[A-Za-z0-9-]{1,64}$")


@dataclass(frozen=True)
class AmountEntitlement:
    tokens: int
    plan: str


AMOUNT_ENTITLEMENTS: Dict[Decimal, AmountEntitlement] = {
    Decimal("5.00"): AmountEntitlement(tokens=7, plan="basic"),
    Decimal("10.00"): AmountEntitlement(tokens=20, plan="premium"),
    Decimal("20.00"): AmountEntitlement(tokens=50, plan="premium_plus"),
}


@dataclass(frozen=True)
class CaptureReceipt:
    plan: str
    tokens_added: int
    total_tokens: int
    token: str


def normalize_amount(value: Any) -> Optional[Decimal]:
    """Amount rounded to cents, or None for anything that is not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite():
        return None
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def resolve_allowed_amount(value: Any) -> Optional[Decimal]:
    amount = normalize_amount(value)
    if amount is None or amount not in AMOUNT_ENTITLEMENTS:
        return None
    return amount


def _provider_failure(exc: PaymentProviderError, action: str) -> Exception:
    if exc.retryable:
        return UpstreamUnavailableError(f"Failed to {action} PayPal order.")
    return PaymentRejectedError(str(exc) or f"Failed to {action} PayPal order.")


def create_order(provider: PaymentProvider, amount: Any) -> str:
    """
    Create a provider order for an allow-listed amount.

    Raises:
        ValidationError: unsupported amount
        UpstreamUnavailableError: provider unreachable or order id missing
    """
    allowed = resolve_allowed_amount(amount)
    if allowed is None:
        raise ValidationError("Unsupported amount.")

    with start_span("payments.create_order", {"amount": str(allowed)}):
        try:
            order_id = provider.create_order(f"{allowed:.2f}", settings.PAYMENT_CURRENCY)
        except PaymentProviderError as e:
            raise _provider_failure(e, "create")

    if not order_id:
        raise UpstreamUnavailableError("PayPal order ID missing.")

    log_event("info", "payment.order_created", event_type="payment.created", extra={"order_id": order_id, "amount": allowed})
    return order_id


def verify_capture(capture: OrderCapture, merchant_id: Optional[str] = None) -> AmountEntitlement:
    """
    Check a capture against every reconciliation gate.

    Raises:
        PaymentRejectedError: status, currency, amount or payee mismatch
    """
    if str(capture.status or "").upper() != "COMPLETED":
        raise PaymentRejectedError("PayPal order not completed.")

    value = normalize_amount(capture.amount)
    if value is None or capture.currency != settings.PAYMENT_CURRENCY:
        raise PaymentRejectedError("Invalid PayPal capture amount.")

    entitlement = AMOUNT_ENTITLEMENTS.get(value)
    if entitlement is None:
        raise PaymentRejectedError("Unsupported capture amount.")

    expected_payee = merchant_id if merchant_id is not None else settings.PAYPAL_MERCHANT_ID
    if expected_payee and capture.payee_merchant_id != expected_payee:
        raise PaymentRejectedError("Payee mismatch for PayPal capture.")

    return entitlement


def credit_user(store: RecordStore, email: Optional[str], entitlement: AmountEntitlement) -> User:
    """
    Add tokens and set the plan of the user with `email`.

    Read-modify-write of users.json under its lock.

    Raises:
        NotFoundError: no user with that email
    """
    normalized = normalize_email(email)
    if not normalized:
        raise NotFoundError("User not found.")
    with store.locked(USERS_FILE):
        records = store.read(USERS_FILE, [])
        for index, record in enumerate(records):
            if not isinstance(record, dict) or normalize_email(record.get("email")) != normalized:
                continue
            user = User.model_validate(record)
            user.tokens = user.tokens + entitlement.tokens
            user.plan = entitlement.plan
            records[index] = user.to_record()
            store.write(USERS_FILE, records)
            return user

    raise NotFoundError("User not found.")


def capture_order(
    provider: PaymentProvider,
    store: RecordStore,
    order_id: Optional[str],
    email: Optional[str],
    *,
    merchant_id: Optional[str] = None,
) -> CaptureReceipt:
    """
    Capture an approved order and credit the authenticated user.

    Raises:
        ValidationError: missing/invalid order id
        PaymentRejectedError: a gate failed, or the provider refused the
            capture (e.g. the order was already captured)
        UpstreamUnavailableError: provider unreachable
        NotFoundError: authenticated user no longer exists
    """
    order = str(order_id or "").strip()
    if not order:
        raise ValidationError("Order ID is required.")
    if not _ORDER_ID.match(order):
        raise ValidationError("Invalid order ID.")

    with start_span("payments.capture_order", {"order_id": order}):
        try:
            capture = provider.capture_order(order)
        except PaymentProviderError as e:
            log_event("warning", "payment.capture_failed", event_type="payment.rejected",
                      error_code=e.issue or "provider_error", extra={"order_id": order, "status": e.status_code})
            raise _provider_failure(e, "capture")

        try:
            entitlement = verify_capture(capture, merchant_id)
        except PaymentRejectedError as e:
            log_event("warning", "payment.rejected", event_type="payment.rejected",
                      error_code=e.code, extra={"order_id": order, "reason": e.message})
            raise

        user = credit_user(store, email, entitlement)

    log_event(
        "info",
        "payment.credited",
        user_id=user.id,
        event_type="payment.credited",
        extra={"order_id": order, "plan": user.plan, "tokens_added": entitlement.tokens},
    )
    return CaptureReceipt(
        plan=user.plan,
        tokens_added=entitlement.tokens,
        total_tokens=user.tokens,
        token=issue_session_token(user.to_record()),
    )
