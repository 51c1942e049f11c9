"""
PayPal payment provider implementation (Orders v2).

Implements PaymentProvider using the REST API over httpx:
client-credentials token exchange, order creation and capture.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from placesapi.core.config import settings
from placesapi.core.errors import ConfigurationError
from placesapi.features.payments.provider import OrderCapture, PaymentProviderError

logger = logging.getLogger("placesapi")


def _json_or_empty(response: httpx.Response) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _first(items: Any) -> Dict[str, Any]:
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0]
    return {}


def parse_capture(order: Dict[str, Any], order_id: str) -> OrderCapture:
    """Extract the first purchase unit's first capture from an order body."""
    unit = _first(order.get("purchase_units"))
    capture = _first((unit.get("payments") or {}).get("captures"))
    amount = capture.get("amount") or {}
    payee = unit.get("payee") or {}
    return OrderCapture(
        order_id=order.get("id") or order_id,
        status=capture.get("status") or order.get("status"),
        amount=amount.get("value"),
        currency=amount.get("currency_code"),
        payee_merchant_id=payee.get("merchant_id"),
        raw=order,
    )


class PayPalProvider:
    """PayPal implementation of PaymentProvider protocol."""

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http: Optional[httpx.Client] = None,
    ):
        """
        Initialize PayPal provider.

        Args:
            client_id: REST client id (defaults to PAYPAL_CLIENT_ID)
            client_secret: REST secret (defaults to PAYPAL_CLIENT_SECRET)
            base_url: API host (defaults to PAYPAL_BASE_URL, sandbox by default)
        """
        self.client_id = client_id or settings.PAYPAL_CLIENT_ID
        self.client_secret = client_secret or settings.PAYPAL_CLIENT_SECRET
        self.base_url = (base_url or settings.PAYPAL_BASE_URL).rstrip("/")

        if not self.client_id or not self.client_secret:
            raise ConfigurationError("PayPal credentials are not configured.")

        self._http = http or httpx.Client(timeout=timeout or settings.UPSTREAM_TIMEOUT_SECONDS)

    def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            return self._http.request(method, f"{self.base_url}{path}", **kwargs)
        except httpx.TimeoutException:
            raise PaymentProviderError("PayPal request timed out.")
        except httpx.HTTPError as e:
            raise PaymentProviderError(f"PayPal request failed: {type(e).__name__}")

    def get_access_token(self) -> str:
        response = self._send(
            "POST",
            "/v1/oauth2/token",
            auth=(self.client_id, self.client_secret),
            data={"grant_type": "client_credentials"},
            headers={"Accept": "application/json"},
        )
        data = _json_or_empty(response)
        if response.status_code >= 400:
            # Bad credentials are an operator problem, not a client one
            raise PaymentProviderError(
                data.get("error_description") or "Failed to fetch PayPal access token.",
                status_code=502,
            )
        token = data.get("access_token")
        if not token:
            raise PaymentProviderError("PayPal access token is missing.", status_code=502)
        return token

    def _api(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        token = self.get_access_token()
        response = self._send(
            method,
            path,
            json=body,
            headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json"},
        )
        data = _json_or_empty(response)
        if response.status_code >= 400:
            issue = _first(data.get("details")).get("issue")
            logger.warning(
                "paypal.error",
                extra={"status": response.status_code, "error_code": issue or data.get("name")},
            )
            raise PaymentProviderError(
                data.get("message") or "PayPal request failed.",
                status_code=response.status_code,
                issue=issue,
            )
        return data

    def create_order(self, amount: str, currency: str) -> Optional[str]:
        order = self._api(
            "POST",
            "/v2/checkout/orders",
            {
                "intent": "CAPTURE",
                "purchase_units": [
                    {"amount": {"currency_code": currency, "value": amount}},
                ],
            },
        )
        return order.get("id") or None

    def capture_order(self, order_id: str) -> OrderCapture:
        order = self._api("POST", f"/v2/checkout/orders/{order_id}/capture")
        return parse_capture(order, order_id)

    def close(self) -> None:
        self._http.close()
