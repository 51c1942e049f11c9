"""
Payment provider protocol.

Defines the interface the reconciliation service needs from a payment
provider (PayPal Orders v2 today) so it can be swapped or faked.
"""
from typing import Protocol, Dict, Any, Optional
from dataclasses import dataclass, field


@dataclass
class OrderCapture:
    """First capture of the first purchase unit of a captured order."""
    order_id: str
    status: Optional[str]
    amount: Optional[str]
    currency: Optional[str]
    payee_merchant_id: Optional[str]
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)


class PaymentProvider(Protocol):
    """
    Protocol for payment providers.

    Implementations must handle:
    - Credential exchange
    - Order creation for an exact amount and currency
    - Order capture
    """

    def create_order(self, amount: str, currency: str) -> Optional[str]:
        """
        Create an order to be approved by the buyer.

        Args:
            amount: Decimal string with two places ("5.00")
            currency: ISO currency code

        Returns:
            Provider order id (None if the provider omitted it)

        Raises:
            PaymentProviderError: provider rejected the request or is unreachable
        """
        ...

    def capture_order(self, order_id: str) -> OrderCapture:
        """
        Capture an approved order.

        Raises:
            PaymentProviderError: provider rejected the capture (e.g. already
                captured) or is unreachable
        """
        ...


class PaymentProviderError(Exception):
    """Base exception for payment provider errors.

    `status_code` is the provider's HTTP status, None for transport failures.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, issue: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.issue = issue

    @property
    def retryable(self) -> bool:
        return self.status_code is None or self.status_code >= 500
