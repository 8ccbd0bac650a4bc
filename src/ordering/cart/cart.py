"""Shopping cart rows: one cart per user, one item per product.

The cart is ephemeral: its items are deleted in the same transaction that
turns them into an order. Writers lock the cart row first (``lock_cart``).
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint, select, update
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from shared.database import Base, new_id, utcnow


class Cart(Base):
    __tablename__ = "carts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(36), unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    items: Mapped[list["CartItem"]] = relationship(
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItem.created_at.desc()",
    )


class CartItem(Base):
    __tablename__ = "cart_items"
    __table_args__ = (UniqueConstraint("cart_id", "product_id", name="uq_cart_items_cart_product"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    cart_id: Mapped[str] = mapped_column(ForeignKey("carts.id", ondelete="CASCADE"), index=True)
    product_id: Mapped[str] = mapped_column(String(36))
    quantity: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    cart: Mapped[Cart] = relationship(back_populates="items")


def lock_cart(session: Session, user_id: str) -> bool:
    """Take the write lock on the user's cart row until the transaction ends.

    Checkout and every cart mutation start with this, so for one user they
    run strictly one after another. Returns False when the user has no cart.
    """
    result = session.execute(
        update(Cart)
        .where(Cart.user_id == user_id)
        .values(updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def find_cart(session: Session, user_id: str) -> Cart | None:
    return session.scalars(select(Cart).where(Cart.user_id == user_id)).first()


def get_or_create_cart(session: Session, user_id: str) -> Cart:
    cart = find_cart(session, user_id)
    if cart is None:
        cart = Cart(id=new_id(), user_id=user_id)
        session.add(cart)
        session.flush()
    return cart
