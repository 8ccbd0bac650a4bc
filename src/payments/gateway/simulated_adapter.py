"""Simulated payment gateway: a stand-in for a real processor round-trip.

Each charge waits a fixed delay and then succeeds with a configurable
probability. Nothing leaves the process.
"""

import random
import time
from collections.abc import Callable
from decimal import Decimal
from uuid import uuid4

import structlog

from payments.gateway.port import ChargeResult, PaymentGateway

logger = structlog.get_logger(__name__)


class SimulatedGateway(PaymentGateway):
    def __init__(
        self,
        delay_seconds: float = 2.0,
        success_rate: float = 0.95,
        rng: random.Random | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if not 0.0 <= success_rate <= 1.0:
            raise ValueError("success_rate must be between 0 and 1")
        self.delay_seconds = delay_seconds
        self.success_rate = success_rate
        self._rng = rng or random.Random()
        self._sleep = sleep

    def create_charge(self, amount: Decimal, currency: str, idempotency_key: str) -> ChargeResult:
        if self.delay_seconds > 0:
            self._sleep(self.delay_seconds)

        if self._rng.random() < self.success_rate:
            return ChargeResult(
                success=True,
                gateway_transaction_id=f"sim_txn_{uuid4().hex[:12]}",
                gateway_status="succeeded",
            )

        logger.info("Simulated charge declined", order_id=idempotency_key, amount=str(amount), currency=currency)
        return ChargeResult(success=False, gateway_status="failed", failure_reason="Payment declined")
