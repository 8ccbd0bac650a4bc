"""Payment gateway port (abstract interface).

Defines the contract every gateway adapter implements, so settlement can
run against the simulated gateway in development, the fake gateway in tests
and a real processor in production without touching checkout.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class ChargeResult:
    """Result of a payment charge attempt."""

    success: bool
    gateway_transaction_id: str | None = None
    gateway_status: str | None = None
    failure_reason: str | None = None


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_charge(self, amount: Decimal, currency: str, idempotency_key: str) -> ChargeResult:
        """Charge ``amount`` for one order.

        ``idempotency_key`` is the order id: a gateway seeing the same key
        twice must not charge twice.
        """
