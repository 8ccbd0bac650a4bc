"""Cart management: add, update, remove and clear cart lines.

Each call runs inside the caller's transaction. Stock is checked when a line
is added or resized, but nothing is reserved until checkout.
"""

from collections.abc import Sequence
from decimal import Decimal

import structlog
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from catalogue.product import Product
from ordering.cart.cart import Cart, CartItem, find_cart, get_or_create_cart, lock_cart
from ordering.cart.snapshot import CartLine
from ordering.order.pricing import round_currency
from shared.database import new_id
from shared.errors import ConflictError, ErrorCode, InvalidRequestError, NotFoundError

logger = structlog.get_logger(__name__)


def _sellable_product(session: Session, product_id: str) -> Product:
    product = session.get(Product, product_id)
    if product is None:
        raise NotFoundError(ErrorCode.PRODUCT_NOT_FOUND, "Product not found")
    if not product.is_active:
        raise InvalidRequestError(ErrorCode.PRODUCT_UNAVAILABLE, "Product is not available")
    return product


def _check_quantity(quantity: int) -> None:
    if quantity <= 0:
        raise InvalidRequestError(ErrorCode.INVALID_QUANTITY, "Quantity must be greater than 0")


def _check_stock(product: Product, quantity: int) -> None:
    if product.track_quantity and product.quantity < quantity:
        raise InvalidRequestError(ErrorCode.INSUFFICIENT_STOCK, "Insufficient stock")


def _owned_item(session: Session, user_id: str, item_id: str) -> CartItem:
    item = session.scalars(
        select(CartItem).join(Cart).where(CartItem.id == item_id, Cart.user_id == user_id)
    ).first()
    if item is None:
        raise NotFoundError(ErrorCode.CART_ITEM_NOT_FOUND, "Cart item not found")
    return item


def add_to_cart(session: Session, user_id: str, product_id: str, quantity: int = 1) -> CartItem:
    """Add units of a product, merging into the existing line for that product."""
    _check_quantity(quantity)
    lock_cart(session, user_id)
    product = _sellable_product(session, product_id)
    cart = get_or_create_cart(session, user_id)

    item = session.scalars(
        select(CartItem).where(CartItem.cart_id == cart.id, CartItem.product_id == product_id)
    ).first()
    new_quantity = quantity + (item.quantity if item else 0)
    _check_stock(product, new_quantity)

    if item is None:
        item = CartItem(id=new_id(), cart_id=cart.id, product_id=product_id, quantity=quantity)
        session.add(item)
    else:
        item.quantity = new_quantity
    session.flush()

    logger.info("Cart line added", user_id=user_id, product_id=product_id, quantity=new_quantity)
    return item


def update_cart_item(session: Session, user_id: str, item_id: str, quantity: int) -> CartItem:
    lock_cart(session, user_id)
    item = _owned_item(session, user_id, item_id)
    _check_quantity(quantity)

    product = session.get(Product, item.product_id)
    if product is not None:
        _check_stock(product, quantity)

    item.quantity = quantity
    session.flush()
    return item


def remove_from_cart(session: Session, user_id: str, item_id: str) -> None:
    lock_cart(session, user_id)
    item = _owned_item(session, user_id, item_id)
    session.delete(item)
    session.flush()
    logger.info("Cart line removed", user_id=user_id, item_id=item_id)


def clear_cart(session: Session, user_id: str) -> int:
    """Remove every line from the user's cart. Returns how many were removed."""
    if not lock_cart(session, user_id):
        return 0
    cart = find_cart(session, user_id)
    result = session.execute(delete(CartItem).where(CartItem.cart_id == cart.id))
    session.expire(cart, ["items"])
    return result.rowcount


def delete_cart_items(session: Session, lines: Sequence[CartLine]) -> int:
    """Delete the cart lines checkout ordered, each only at the quantity it read.

    Raises ConflictError when any line was resized or removed in the meantime,
    so units added after the snapshot are never deleted unordered.
    """
    deleted = 0
    for line in lines:
        result = session.execute(
            delete(CartItem)
            .where(CartItem.id == line.item_id, CartItem.quantity == line.quantity)
            .execution_options(synchronize_session=False)
        )
        deleted += result.rowcount

    if deleted != len(lines):
        raise ConflictError(ErrorCode.CART_CHANGED, "Cart changed during checkout, please retry")
    return deleted


def get_cart_summary(session: Session, user_id: str) -> dict:
    """Lines with current prices, the running subtotal and item count."""
    cart = find_cart(session, user_id)
    items = []
    if cart is not None:
        rows = session.execute(
            select(CartItem, Product)
            .outerjoin(Product, Product.id == CartItem.product_id)
            .where(CartItem.cart_id == cart.id)
            .order_by(CartItem.created_at.desc(), CartItem.id)
        ).all()
        for item, product in rows:
            price = product.price if product is not None else None
            items.append(
                {
                    "id": item.id,
                    "product_id": item.product_id,
                    "name": product.name if product is not None else None,
                    "price": price,
                    "quantity": item.quantity,
                    "line_total": round_currency(price * item.quantity) if price is not None else None,
                }
            )

    subtotal = sum((i["line_total"] for i in items if i["line_total"] is not None), Decimal("0"))
    return {
        "cart_id": cart.id if cart else None,
        "items": items,
        "item_count": sum(i["quantity"] for i in items),
        "subtotal": round_currency(subtotal),
    }
