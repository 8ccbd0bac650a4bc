"""Checkout orchestrator: turns a user's cart into a pending order.

Flow (one transaction):
    1. Lock the user's cart row
    2. Resolve both addresses against the user (not found otherwise)
    3. Read the cart snapshot (EMPTY_CART when there are no lines)
    4. Re-validate every line against live product state
    5. Assemble and insert the order with its lines
    6. Reserve stock for each line with a conditional decrement
    7. Delete the snapshot's cart lines at the quantities that were ordered
    8. Commit

Any failure rolls back every step: no order row, no stock movement, the cart
untouched. After commit the order id is handed to the settlement scheduler
and the caller gets the order back in PENDING/PENDING immediately.
"""

from typing import Protocol

import structlog

from identity.address import find_user_address
from inventory.stock.ledger import InventoryLedger
from ordering.cart.cart import lock_cart
from ordering.cart.management import delete_cart_items
from ordering.cart.snapshot import read_cart_snapshot
from ordering.cart.validation import CartValidation, validate_cart
from ordering.order.assembly import OrderAssembler
from ordering.order.cancellation import cancel_order
from ordering.order.order import Order
from ordering.order.queries import get_order
from shared.database import Database
from shared.errors import ConflictError, ErrorCode, InvalidRequestError, NotFoundError

logger = structlog.get_logger(__name__)


class Scheduler(Protocol):
    def submit(self, order_id: str): ...


class CheckoutService:
    def __init__(self, database: Database, assembler: OrderAssembler, scheduler: Scheduler | None = None) -> None:
        self.database = database
        self.assembler = assembler
        self.scheduler = scheduler

    def validate_cart(self, user_id: str) -> CartValidation:
        """Check the user's cart without changing anything."""
        with self.database.session() as session:
            return validate_cart(session, read_cart_snapshot(session, user_id))

    def place_order(
        self,
        user_id: str,
        shipping_address_id: str,
        billing_address_id: str,
        notes: str | None = None,
    ) -> Order:
        with self.database.transaction() as session:
            # Cart edits by the same user wait until this transaction ends
            lock_cart(session, user_id)

            for address_id in {shipping_address_id, billing_address_id}:
                if find_user_address(session, user_id, address_id) is None:
                    raise NotFoundError(ErrorCode.ADDRESS_NOT_FOUND, "Address not found")

            snapshot = read_cart_snapshot(session, user_id)
            if snapshot.is_empty:
                raise InvalidRequestError(ErrorCode.EMPTY_CART, "Cart is empty")

            validation = validate_cart(session, snapshot)
            if validation.stock_only:
                raise ConflictError(ErrorCode.INSUFFICIENT_STOCK, "Not enough stock", validation.issues)
            if not validation.valid:
                raise InvalidRequestError(ErrorCode.CART_INVALID, "Cart has invalid items", validation.issues)

            order = self.assembler.assemble(snapshot, shipping_address_id, billing_address_id, notes)
            session.add(order)
            session.flush()

            # Stock may have moved since validation read it
            ledger = InventoryLedger(session)
            for line in snapshot.lines:
                if not ledger.reserve(line.product_id, line.quantity):
                    raise ConflictError(
                        ErrorCode.INSUFFICIENT_STOCK,
                        f"Product {line.product_id} sold out during checkout",
                    )

            delete_cart_items(session, snapshot.lines)

        logger.info(
            "Order placed",
            order_id=order.id,
            order_number=order.order_number,
            user_id=user_id,
            total=str(order.total),
            lines=len(order.lines),
        )

        if self.scheduler is not None:
            self.scheduler.submit(order.id)
        return order

    def cancel_order(self, user_id: str, order_id: str) -> Order:
        with self.database.transaction() as session:
            cancel_order(session, user_id, order_id)
            return get_order(session, order_id, user_id=user_id)
