"""Reservation release: the one compensating path that returns stock.

Customer cancellation, failed settlement and administrative cancel/refund
all call ``release_reservation``. It must only run after the caller won the
guarded status write, inside the same transaction, so an order's stock is
credited back at most once.
"""

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from inventory.stock.ledger import InventoryLedger
from ordering.order.order import OrderLine

logger = structlog.get_logger(__name__)


def release_reservation(session: Session, order_id: str) -> dict[str, int]:
    """Credit every tracked line of ``order_id`` back to its product.

    Returns the released quantity per product id. Lines whose product is
    untracked or no longer exists are skipped.
    """
    lines = session.execute(
        select(OrderLine.product_id, OrderLine.quantity).where(OrderLine.order_id == order_id)
    ).all()

    ledger = InventoryLedger(session)
    released: dict[str, int] = {}
    for product_id, quantity in lines:
        if ledger.release(product_id, quantity):
            released[product_id] = released.get(product_id, 0) + quantity
        elif ledger.is_tracked(product_id) is None:
            logger.warning("Cannot release stock for missing product", order_id=order_id, product_id=product_id)

    logger.info("Reservation released", order_id=order_id, released=released)
    return released
