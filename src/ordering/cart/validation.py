"""Cart validation: checks every cart line against live product state.

Checks run in order (existence, active, stock) and stop at the first failure,
so each line produces at most one issue. Validation never writes; checkout
runs it again inside its transaction because stock moves between calls.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum

from sqlalchemy import select
from sqlalchemy.orm import Session

from catalogue.product import Product
from ordering.cart.snapshot import CartSnapshot


class IssueCode(Enum):
    PRODUCT_MISSING = "PRODUCT_MISSING"
    PRODUCT_INACTIVE = "PRODUCT_INACTIVE"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"


@dataclass(frozen=True)
class ValidationIssue:
    product_id: str
    item_id: str
    code: str
    detail: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class CartValidation:
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.issues

    @property
    def stock_only(self) -> bool:
        """True when every issue is a stock shortfall (the cart is otherwise sound)."""
        return bool(self.issues) and all(i.code == IssueCode.INSUFFICIENT_STOCK.value for i in self.issues)


def validate_cart(session: Session, snapshot: CartSnapshot) -> CartValidation:
    product_ids = {line.product_id for line in snapshot.lines}
    products = {}
    if product_ids:
        rows = session.execute(
            select(Product.id, Product.is_active, Product.track_quantity, Product.quantity).where(
                Product.id.in_(product_ids)
            )
        ).all()
        products = {row.id: row for row in rows}

    issues = []
    for line in snapshot.lines:
        product = products.get(line.product_id)

        if product is None:
            issues.append(
                ValidationIssue(
                    product_id=line.product_id,
                    item_id=line.item_id,
                    code=IssueCode.PRODUCT_MISSING.value,
                    detail="Product no longer exists",
                )
            )
            continue

        if not product.is_active:
            issues.append(
                ValidationIssue(
                    product_id=line.product_id,
                    item_id=line.item_id,
                    code=IssueCode.PRODUCT_INACTIVE.value,
                    detail="Product is no longer available",
                )
            )
            continue

        if product.track_quantity and product.quantity < line.quantity:
            issues.append(
                ValidationIssue(
                    product_id=line.product_id,
                    item_id=line.item_id,
                    code=IssueCode.INSUFFICIENT_STOCK.value,
                    detail=f"Only {product.quantity} items available",
                )
            )

    return CartValidation(issues=issues)
