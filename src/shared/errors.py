"""Error taxonomy shared by every storefront context.

Operations raise a StorefrontError subclass carrying a machine-readable code.
The HTTP layer maps the subclass to a status code; ownership failures are
always reported as not-found so callers cannot probe for other users' records.
"""

from collections.abc import Sequence
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    # Checkout
    EMPTY_CART = "EMPTY_CART"
    CART_INVALID = "CART_INVALID"
    ADDRESS_NOT_FOUND = "ADDRESS_NOT_FOUND"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    CART_CHANGED = "CART_CHANGED"

    # Order lifecycle
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    NOT_CANCELLABLE = "NOT_CANCELLABLE"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    ORDER_CONFLICT = "ORDER_CONFLICT"

    # Cart management
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    PRODUCT_UNAVAILABLE = "PRODUCT_UNAVAILABLE"
    CART_ITEM_NOT_FOUND = "CART_ITEM_NOT_FOUND"
    INVALID_QUANTITY = "INVALID_QUANTITY"


class StorefrontError(Exception):
    """Base class for all expected, caller-facing failures."""

    status_code = 400

    def __init__(self, code: ErrorCode, message: str, issues: Sequence[Any] | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.issues = list(issues or [])

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code.value}: {self.message})"

    def to_dict(self) -> dict:
        return {
            "code": self.code.value,
            "message": self.message,
            "issues": [issue.to_dict() if hasattr(issue, "to_dict") else issue for issue in self.issues],
        }


class InvalidRequestError(StorefrontError):
    status_code = 400


class NotFoundError(StorefrontError):
    status_code = 404


class ConflictError(StorefrontError):
    """The request lost a race against a concurrent writer. Safe to retry."""

    status_code = 409
