"""Runtime settings for the storefront, read from environment variables.

Every knob has a development default so the app and the test-suite run with
no environment at all. STOREFRONT_ENV selects the overlay used by logging and
by the non-production-only endpoints.
"""

import os
from dataclasses import dataclass
from decimal import Decimal


def _env(name: str, default: str) -> str:
    value = os.environ.get(name)
    return default if value is None or value == "" else value


@dataclass(frozen=True)
class Settings:
    env: str = "development"
    database_url: str = "sqlite:///storefront.db"

    # Pricing
    currency: str = "USD"
    tax_rate: Decimal = Decimal("0.08")
    shipping_policy: str = "free"  # free | flat | threshold
    shipping_flat_fee: Decimal = Decimal("0.00")
    free_shipping_threshold: Decimal = Decimal("0.00")

    # Settlement
    payment_gateway: str = "simulated"  # simulated | fake
    settlement_delay_seconds: float = 2.0
    settlement_success_rate: float = 0.95
    settlement_timeout_seconds: float = 10.0
    settlement_workers: int = 4

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            env=_env("STOREFRONT_ENV", "development").lower(),
            database_url=_env("DATABASE_URL", "sqlite:///storefront.db"),
            currency=_env("CURRENCY", "USD").upper(),
            tax_rate=Decimal(_env("TAX_RATE", "0.08")),
            shipping_policy=_env("SHIPPING_POLICY", "free").lower(),
            shipping_flat_fee=Decimal(_env("SHIPPING_FLAT_FEE", "0.00")),
            free_shipping_threshold=Decimal(_env("FREE_SHIPPING_THRESHOLD", "0.00")),
            payment_gateway=_env("PAYMENT_GATEWAY", "simulated").lower(),
            settlement_delay_seconds=float(_env("SETTLEMENT_DELAY_SECONDS", "2.0")),
            settlement_success_rate=float(_env("SETTLEMENT_SUCCESS_RATE", "0.95")),
            settlement_timeout_seconds=float(_env("SETTLEMENT_TIMEOUT_SECONDS", "10")),
            settlement_workers=int(_env("SETTLEMENT_WORKERS", "4")),
        )
