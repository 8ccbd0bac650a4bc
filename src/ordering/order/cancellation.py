"""Customer cancellation of a pending order."""

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from ordering.order.order import Order, OrderStatus
from ordering.order.reservation import release_reservation
from ordering.order.transitions import mark_order
from shared.errors import ErrorCode, InvalidRequestError, NotFoundError

logger = structlog.get_logger(__name__)


def cancel_order(session: Session, user_id: str, order_id: str) -> Order:
    """Cancel ``order_id`` for its owner and hand its stock back.

    Only PENDING orders can be cancelled here; confirmed or shipped orders go
    through the administrative status update instead. Runs inside the
    caller's transaction.
    """
    order = session.scalars(select(Order).where(Order.id == order_id, Order.user_id == user_id)).first()
    if order is None:
        raise NotFoundError(ErrorCode.ORDER_NOT_FOUND, "Order not found")

    if order.status != OrderStatus.PENDING.value:
        raise InvalidRequestError(
            ErrorCode.NOT_CANCELLABLE,
            f"Order in status {order.status} cannot be cancelled",
        )

    # Settlement may have resolved the order since it was read
    if not mark_order(session, order_id, [OrderStatus.PENDING], OrderStatus.CANCELLED, user_id=user_id):
        session.refresh(order)
        raise InvalidRequestError(
            ErrorCode.NOT_CANCELLABLE,
            f"Order in status {order.status} cannot be cancelled",
        )

    release_reservation(session, order_id)
    session.refresh(order)
    logger.info("Order cancelled by customer", order_id=order_id, order_number=order.order_number)
    return order
