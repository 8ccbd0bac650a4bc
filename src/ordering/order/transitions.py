"""Guarded status writes for orders.

Every status change is a single UPDATE whose WHERE clause names the statuses
the order may currently be in. When a concurrent writer got there first the
UPDATE matches no row and the caller learns it lost, so it can skip any
follow-up such as releasing stock.
"""

from collections.abc import Iterable

import structlog
from sqlalchemy import update
from sqlalchemy.orm import Session

from ordering.order.order import Order, OrderStatus, PaymentStatus
from shared.database import utcnow

logger = structlog.get_logger(__name__)


def mark_order(
    session: Session,
    order_id: str,
    from_statuses: Iterable[OrderStatus],
    to_status: OrderStatus | None = None,
    payment_status: PaymentStatus | None = None,
    user_id: str | None = None,
) -> bool:
    """Move an order out of one of ``from_statuses``.

    Returns True when this call applied the change, False when the order was
    missing, owned by someone else, or already in another status.
    """
    values = {"updated_at": utcnow()}
    if to_status is not None:
        values["status"] = to_status.value
    if payment_status is not None:
        values["payment_status"] = payment_status.value

    statement = update(Order).where(
        Order.id == order_id,
        Order.status.in_([status.value for status in from_statuses]),
    )
    if user_id is not None:
        statement = statement.where(Order.user_id == user_id)

    result = session.execute(statement.values(**values).execution_options(synchronize_session=False))
    applied = result.rowcount == 1
    if applied:
        logger.info(
            "Order status changed",
            order_id=order_id,
            status=to_status.value if to_status else None,
            payment_status=payment_status.value if payment_status else None,
        )
    return applied
