"""Payment gateway factory.

Builds the gateway an application charges through:
- SimulatedGateway by default (fixed delay, probabilistic outcome)
- FakeGateway for tests and manual runs that need a predictable outcome

PAYMENT_GATEWAY=fake|simulated picks the implementation. The app keeps the
instance on its settlement scheduler; there is no process-wide gateway.
"""

from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.port import PaymentGateway
from payments.gateway.simulated_adapter import SimulatedGateway
from shared.config import Settings


def gateway_from_settings(settings: Settings) -> PaymentGateway:
    if settings.payment_gateway == "fake":
        return FakeGateway()
    if settings.payment_gateway == "simulated":
        return SimulatedGateway(
            delay_seconds=settings.settlement_delay_seconds,
            success_rate=settings.settlement_success_rate,
        )
    raise ValueError(f"Unknown payment gateway: {settings.payment_gateway}")
