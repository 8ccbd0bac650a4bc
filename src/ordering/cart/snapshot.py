"""Cart snapshot: a point-in-time read of a user's cart lines.

Each line carries the product's price as it was at read time. A line whose
product no longer exists keeps ``unit_price=None``; validation reports it.
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from catalogue.product import Product
from ordering.cart.cart import Cart, CartItem


@dataclass(frozen=True)
class CartLine:
    item_id: str
    product_id: str
    quantity: int
    unit_price: Decimal | None


@dataclass(frozen=True)
class CartSnapshot:
    user_id: str
    cart_id: str | None
    lines: tuple[CartLine, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def item_ids(self) -> list[str]:
        return [line.item_id for line in self.lines]


def read_cart_snapshot(session: Session, user_id: str) -> CartSnapshot:
    """Read the user's cart lines joined with current product prices."""
    cart_id = session.scalar(select(Cart.id).where(Cart.user_id == user_id))
    if cart_id is None:
        return CartSnapshot(user_id=user_id, cart_id=None)

    rows = session.execute(
        select(CartItem.id, CartItem.product_id, CartItem.quantity, Product.price)
        .outerjoin(Product, Product.id == CartItem.product_id)
        .where(CartItem.cart_id == cart_id)
        .order_by(CartItem.created_at.desc(), CartItem.id)
    ).all()

    lines = tuple(
        CartLine(item_id=item_id, product_id=product_id, quantity=quantity, unit_price=price)
        for item_id, product_id, quantity, price in rows
    )
    return CartSnapshot(user_id=user_id, cart_id=cart_id, lines=lines)
