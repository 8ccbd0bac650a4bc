"""Settlement scheduler: runs payment settlement off the request path.

Checkout hands over an order id after committing. A worker thread loads the
order, asks the gateway for a charge, and resolves the outcome in its own
transaction. The gateway call is bounded by a timeout; a timeout or a
gateway error counts as a failed payment. A timed-out call that has not
started yet is cancelled, so it never charges an order that was already
cancelled.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from functools import partial
from concurrent.futures import TimeoutError as FutureTimeout
from concurrent.futures import wait as wait_futures

import structlog
from sqlalchemy import select

from ordering.order.order import Order, OrderStatus
from payments.gateway.port import ChargeResult, PaymentGateway
from payments.settlement.resolution import resolve_settlement
from shared.database import Database

logger = structlog.get_logger(__name__)


class SettlementScheduler:
    def __init__(
        self,
        database: Database,
        gateway: PaymentGateway,
        timeout_seconds: float = 10.0,
        max_workers: int = 4,
    ) -> None:
        self.database = database
        self.gateway = gateway
        self.timeout_seconds = timeout_seconds
        self._workers = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="settlement")
        # One gateway slot per worker; a call only queues behind one that already timed out
        self._gateway_calls = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="gateway")
        self._pending: set[Future] = set()
        self._lock = threading.Lock()

    def submit(self, order_id: str) -> Future:
        """Schedule settlement for ``order_id`` and return its tracking future."""
        future = self._workers.submit(self.settle, order_id)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        logger.debug("Settlement scheduled", order_id=order_id)
        return future

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)
        if not future.cancelled() and future.exception() is not None:
            logger.error("Settlement crashed", error=str(future.exception()))

    def _late_charge(self, order_id: str, call: Future) -> None:
        """A timed-out call that was already running finished anyway."""
        if call.cancelled() or call.exception() is not None:
            return
        result = call.result()
        if result.success:
            logger.error(
                "Charge succeeded after its order was cancelled, refund required",
                order_id=order_id,
                gateway_transaction_id=result.gateway_transaction_id,
            )

    def _charge(self, order_id: str, amount, currency: str) -> ChargeResult:
        call = self._gateway_calls.submit(self.gateway.create_charge, amount, currency, order_id)
        try:
            return call.result(timeout=self.timeout_seconds)
        except FutureTimeout:
            if call.cancel():
                logger.warning("Gateway call abandoned before it started", order_id=order_id)
            else:
                call.add_done_callback(partial(self._late_charge, order_id))
                logger.warning("Gateway timed out", order_id=order_id, timeout=self.timeout_seconds)
            return ChargeResult(success=False, gateway_status="timeout", failure_reason="Gateway timed out")
        except Exception as exc:
            logger.warning("Gateway call failed", order_id=order_id, error=str(exc))
            return ChargeResult(success=False, gateway_status="error", failure_reason=str(exc))

    def settle(self, order_id: str) -> bool:
        """Charge and resolve one order synchronously. Returns True if the order changed."""
        with self.database.session() as session:
            row = session.execute(
                select(Order.status, Order.total, Order.currency).where(Order.id == order_id)
            ).first()
        if row is None:
            logger.warning("Settlement skipped, order not found", order_id=order_id)
            return False
        if row.status != OrderStatus.PENDING.value:
            logger.info("Settlement skipped, order no longer pending", order_id=order_id, status=row.status)
            return False

        result = self._charge(order_id, row.total, row.currency)
        with self.database.transaction() as session:
            return resolve_settlement(session, order_id, result.success, result.failure_reason)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until every scheduled settlement finished. False on timeout."""
        with self._lock:
            pending = set(self._pending)
        _, not_done = wait_futures(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait: bool = True) -> None:
        self._workers.shutdown(wait=wait)
        self._gateway_calls.shutdown(wait=wait, cancel_futures=not wait)
