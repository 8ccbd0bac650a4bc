"""Order assembly: prices a validated cart snapshot and builds the order.

The subtotal is summed at full precision and rounded once, so per-line
rounding never compounds. Tax is rounded from the rounded subtotal. The
result is an unsaved ``Order`` with its lines; the caller persists it.
"""

import secrets
import time
from decimal import Decimal

from ordering.cart.snapshot import CartSnapshot
from ordering.order.order import Order, OrderLine, OrderStatus, PaymentStatus
from ordering.order.pricing import FreeShipping, ShippingPolicy, round_currency, shipping_policy_from_settings
from shared.config import Settings
from shared.database import new_id, utcnow

_BASE36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def generate_order_number() -> str:
    """Customer-facing order number: ``ORD-<epoch millis>-<6 random base36>``."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(6))
    return f"ORD-{int(time.time() * 1000)}-{suffix}"


class OrderAssembler:
    def __init__(
        self,
        tax_rate: Decimal = Decimal("0.08"),
        shipping_policy: ShippingPolicy | None = None,
        currency: str = "USD",
    ) -> None:
        if tax_rate < 0:
            raise ValueError("Tax rate cannot be negative")
        self.tax_rate = Decimal(tax_rate)
        self.shipping_policy = shipping_policy or FreeShipping()
        self.currency = currency

    @classmethod
    def from_settings(cls, settings: Settings) -> "OrderAssembler":
        return cls(
            tax_rate=settings.tax_rate,
            shipping_policy=shipping_policy_from_settings(settings),
            currency=settings.currency,
        )

    def price(self, snapshot: CartSnapshot) -> dict[str, Decimal]:
        """Compute subtotal, tax, shipping and total for a snapshot."""
        raw_subtotal = sum((line.unit_price * line.quantity for line in snapshot.lines), Decimal("0"))
        subtotal = round_currency(raw_subtotal)
        tax_amount = round_currency(subtotal * self.tax_rate)
        shipping_amount = round_currency(self.shipping_policy.charge(subtotal))
        return {
            "subtotal": subtotal,
            "tax_amount": tax_amount,
            "shipping_amount": shipping_amount,
            "total": subtotal + tax_amount + shipping_amount,
        }

    def assemble(
        self,
        snapshot: CartSnapshot,
        shipping_address_id: str,
        billing_address_id: str,
        notes: str | None = None,
    ) -> Order:
        if snapshot.is_empty:
            raise ValueError("Cannot assemble an order from an empty cart")
        if any(line.unit_price is None for line in snapshot.lines):
            raise ValueError("Every cart line needs a price before assembly")

        now = utcnow()
        order = Order(
            id=new_id(),
            order_number=generate_order_number(),
            user_id=snapshot.user_id,
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            currency=self.currency,
            notes=notes,
            shipping_address_id=shipping_address_id,
            billing_address_id=billing_address_id,
            created_at=now,
            updated_at=now,
            **self.price(snapshot),
        )
        order.lines = [
            OrderLine(
                id=new_id(),
                product_id=line.product_id,
                position=position,
                quantity=line.quantity,
                price=line.unit_price,
            )
            for position, line in enumerate(snapshot.lines)
        ]
        return order
