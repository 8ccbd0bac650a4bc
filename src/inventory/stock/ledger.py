"""Inventory ledger: atomic movements of the per-product stock counter.

Stock Level Model:
    quantity:       units available to sell (never negative)
    track_quantity: when false the product has unlimited stock and the ledger
                    never moves its counter

Every movement is a single conditional UPDATE evaluated by the database, so
two sessions racing for the last units cannot both win: the loser's UPDATE
matches zero rows and it is told so.
"""

import structlog
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from catalogue.product import Product

logger = structlog.get_logger(__name__)


class InventoryLedger:
    """Stock movements bound to the caller's session (and transaction)."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def available(self, product_id: str) -> int | None:
        """Current quantity, or None when the product does not exist."""
        return self.session.scalar(select(Product.quantity).where(Product.id == product_id))

    def is_tracked(self, product_id: str) -> bool | None:
        return self.session.scalar(select(Product.track_quantity).where(Product.id == product_id))

    def reserve(self, product_id: str, quantity: int) -> bool:
        """Decrement tracked stock by ``quantity`` if at least that much remains.

        Returns True when the units were reserved or the product does not track
        stock, False when the product is missing or short.
        """
        if quantity <= 0:
            raise ValueError("Reserved quantity must be positive")

        result = self.session.execute(
            update(Product)
            .where(
                Product.id == product_id,
                Product.track_quantity.is_(True),
                Product.quantity >= quantity,
            )
            .values(quantity=Product.quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            logger.debug("Stock reserved", product_id=product_id, quantity=quantity)
            return True

        tracked = self.is_tracked(product_id)
        if tracked is False:
            return True

        logger.info(
            "Stock reservation refused",
            product_id=product_id,
            quantity=quantity,
            available=self.available(product_id),
        )
        return False

    def release(self, product_id: str, quantity: int) -> bool:
        """Credit ``quantity`` units back to a tracked product.

        Returns False (and changes nothing) for untracked or missing products.
        """
        if quantity <= 0:
            raise ValueError("Released quantity must be positive")

        result = self.session.execute(
            update(Product)
            .where(Product.id == product_id, Product.track_quantity.is_(True))
            .values(quantity=Product.quantity + quantity)
            .execution_options(synchronize_session=False)
        )
        released = result.rowcount == 1
        if released:
            logger.debug("Stock released", product_id=product_id, quantity=quantity)
        return released
