"""Read side for orders: owner lookups, admin listing and stats."""

import math
from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from ordering.order.order import Order, OrderStatus, PaymentStatus
from ordering.order.pricing import round_currency
from shared.errors import ErrorCode, NotFoundError

MAX_PAGE_SIZE = 100


@dataclass
class Page:
    items: list[Order] = field(default_factory=list)
    page: int = 1
    limit: int = 10
    total: int = 0

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def _clamp(page: int, limit: int) -> tuple[int, int]:
    return max(page, 1), min(max(limit, 1), MAX_PAGE_SIZE)


def _paginate(session: Session, conditions: list, page: int, limit: int) -> Page:
    page, limit = _clamp(page, limit)
    total = session.scalar(select(func.count()).select_from(Order).where(*conditions)) or 0
    orders = session.scalars(
        select(Order)
        .where(*conditions)
        .options(selectinload(Order.lines))
        .order_by(Order.created_at.desc(), Order.id)
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()
    return Page(items=list(orders), page=page, limit=limit, total=total)


def get_order(session: Session, order_id: str, user_id: str | None = None) -> Order:
    """Fetch an order with its lines.

    With ``user_id`` the lookup is scoped to that owner; someone else's order
    is reported as not found.
    """
    statement = select(Order).where(Order.id == order_id).options(selectinload(Order.lines))
    if user_id is not None:
        statement = statement.where(Order.user_id == user_id)

    order = session.scalars(statement).first()
    if order is None:
        raise NotFoundError(ErrorCode.ORDER_NOT_FOUND, "Order not found")
    return order


def get_order_by_number(session: Session, order_number: str, user_id: str | None = None) -> Order:
    statement = select(Order).where(Order.order_number == order_number).options(selectinload(Order.lines))
    if user_id is not None:
        statement = statement.where(Order.user_id == user_id)

    order = session.scalars(statement).first()
    if order is None:
        raise NotFoundError(ErrorCode.ORDER_NOT_FOUND, "Order not found")
    return order


def list_orders(session: Session, user_id: str, page: int = 1, limit: int = 10) -> Page:
    """The user's orders, newest first."""
    return _paginate(session, [Order.user_id == user_id], page, limit)


def list_all_orders(
    session: Session,
    page: int = 1,
    limit: int = 10,
    status: OrderStatus | None = None,
    payment_status: PaymentStatus | None = None,
) -> Page:
    conditions = []
    if status is not None:
        conditions.append(Order.status == status.value)
    if payment_status is not None:
        conditions.append(Order.payment_status == payment_status.value)
    return _paginate(session, conditions, page, limit)


def order_stats(session: Session) -> dict:
    """Order counts by headline status and revenue from delivered orders."""

    def count(*conditions) -> int:
        return session.scalar(select(func.count()).select_from(Order).where(*conditions)) or 0

    revenue = session.scalar(
        select(func.coalesce(func.sum(Order.total), 0)).where(Order.status == OrderStatus.DELIVERED.value)
    )
    return {
        "total_orders": count(),
        "pending_orders": count(Order.status == OrderStatus.PENDING.value),
        "completed_orders": count(Order.status == OrderStatus.DELIVERED.value),
        "cancelled_orders": count(Order.status == OrderStatus.CANCELLED.value),
        "total_revenue": round_currency(Decimal(str(revenue))),
    }
