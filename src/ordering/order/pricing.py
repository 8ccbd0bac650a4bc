"""Money rounding and shipping policies used when pricing an order.

Shipping is a pluggable rule: the assembler asks its policy for the charge
on a given subtotal and never hardcodes the amount.
"""

from decimal import ROUND_HALF_UP, Decimal

from shared.config import Settings

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def round_currency(amount: Decimal) -> Decimal:
    """Round to two decimal places, halves away from zero."""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


class ShippingPolicy:
    name = "base"

    def charge(self, subtotal: Decimal) -> Decimal:
        raise NotImplementedError


class FreeShipping(ShippingPolicy):
    name = "free"

    def charge(self, subtotal: Decimal) -> Decimal:  # noqa: ARG002
        return ZERO


class FlatRateShipping(ShippingPolicy):
    name = "flat"

    def __init__(self, fee: Decimal) -> None:
        if fee < 0:
            raise ValueError("Shipping fee cannot be negative")
        self.fee = round_currency(fee)

    def charge(self, subtotal: Decimal) -> Decimal:  # noqa: ARG002
        return self.fee


class ThresholdShipping(ShippingPolicy):
    """Flat fee below ``free_over``; free at or above it."""

    name = "threshold"

    def __init__(self, fee: Decimal, free_over: Decimal) -> None:
        if fee < 0:
            raise ValueError("Shipping fee cannot be negative")
        self.fee = round_currency(fee)
        self.free_over = round_currency(free_over)

    def charge(self, subtotal: Decimal) -> Decimal:
        return ZERO if subtotal >= self.free_over else self.fee


def shipping_policy_from_settings(settings: Settings) -> ShippingPolicy:
    if settings.shipping_policy == "free":
        return FreeShipping()
    if settings.shipping_policy == "flat":
        return FlatRateShipping(settings.shipping_flat_fee)
    if settings.shipping_policy == "threshold":
        return ThresholdShipping(settings.shipping_flat_fee, settings.free_shipping_threshold)
    raise ValueError(f"Unknown shipping policy: {settings.shipping_policy}")
