"""Settlement resolution: applies a payment outcome to a pending order.

Success confirms the order; failure cancels it and releases its stock
through the same routine customer cancellation uses. Both writes are
guarded on PENDING, so a duplicate or late outcome is a no-op.
"""

import structlog
from sqlalchemy.orm import Session

from ordering.order.order import OrderStatus, PaymentStatus
from ordering.order.reservation import release_reservation
from ordering.order.transitions import mark_order

logger = structlog.get_logger(__name__)


def resolve_settlement(session: Session, order_id: str, success: bool, reason: str | None = None) -> bool:
    """Returns True when this call changed the order."""
    if success:
        applied = mark_order(
            session,
            order_id,
            [OrderStatus.PENDING],
            OrderStatus.CONFIRMED,
            payment_status=PaymentStatus.COMPLETED,
        )
    else:
        applied = mark_order(
            session,
            order_id,
            [OrderStatus.PENDING],
            OrderStatus.CANCELLED,
            payment_status=PaymentStatus.FAILED,
        )
        if applied:
            release_reservation(session, order_id)

    if applied:
        logger.info("Settlement applied", order_id=order_id, success=success, reason=reason)
    else:
        logger.info("Settlement ignored, order no longer pending", order_id=order_id, success=success)
    return applied
