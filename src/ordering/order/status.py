"""Administrative status updates (fulfilment progress, cancel, refund)."""

import structlog
from sqlalchemy.orm import Session

from ordering.order.order import RELEASING_STATES, Order, OrderStatus, PaymentStatus, can_transition
from ordering.order.reservation import release_reservation
from ordering.order.transitions import mark_order
from shared.errors import ConflictError, ErrorCode, InvalidRequestError, NotFoundError

logger = structlog.get_logger(__name__)


def update_order_status(
    session: Session,
    order_id: str,
    status: OrderStatus | None = None,
    payment_status: PaymentStatus | None = None,
) -> Order:
    """Apply an administrative status and/or payment status change.

    Status moves must follow the order state machine. Moving an order into
    CANCELLED or REFUNDED releases its reserved stock in the same transaction.
    """
    if status is None and payment_status is None:
        raise InvalidRequestError(ErrorCode.INVALID_TRANSITION, "Nothing to update")

    order = session.get(Order, order_id)
    if order is None:
        raise NotFoundError(ErrorCode.ORDER_NOT_FOUND, "Order not found")

    current = OrderStatus(order.status)
    target = status if status is not None and status != current else None

    if target is not None and not can_transition(current, target):
        raise InvalidRequestError(
            ErrorCode.INVALID_TRANSITION,
            f"Cannot move order from {current.value} to {target.value}",
        )

    if not mark_order(session, order_id, [current], target, payment_status=payment_status):
        raise ConflictError(ErrorCode.ORDER_CONFLICT, "Order was modified concurrently, reload and retry")

    if target in RELEASING_STATES:
        release_reservation(session, order_id)

    session.refresh(order)
    logger.info(
        "Order status updated by admin",
        order_id=order_id,
        previous=current.value,
        status=order.status,
        payment_status=order.payment_status,
    )
    return order
