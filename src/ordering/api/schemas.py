"""Pydantic request/response schemas for the Ordering API.

These are external contracts, kept separate from the ORM rows. Money is
serialized as a decimal string so no precision is lost in JSON.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from ordering.order.order import OrderStatus, PaymentStatus


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)


class UpdateCartItemRequest(BaseModel):
    quantity: int = Field(ge=1)


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    shipping_address_id: str
    billing_address_id: str
    notes: str | None = Field(default=None, max_length=500)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping_address_id": "6f1c2a4e-0000-0000-0000-000000000001",
                    "billing_address_id": "6f1c2a4e-0000-0000-0000-000000000001",
                    "notes": "Leave at the front desk",
                }
            ]
        }
    }


class UpdateOrderStatusRequest(BaseModel):
    status: OrderStatus | None = None
    payment_status: PaymentStatus | None = None


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class CartItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    product_id: str
    quantity: int


class CartLineSummary(BaseModel):
    id: str
    product_id: str
    name: str | None = None
    price: Decimal | None = None
    quantity: int
    line_total: Decimal | None = None


class CartSummaryResponse(BaseModel):
    cart_id: str | None = None
    items: list[CartLineSummary] = []
    item_count: int = 0
    subtotal: Decimal = Decimal("0.00")


class ValidationIssueResponse(BaseModel):
    product_id: str
    item_id: str
    code: str
    detail: str


class CartValidationResponse(BaseModel):
    valid: bool
    issues: list[ValidationIssueResponse] = []


class OrderLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    product_id: str
    quantity: int
    price: Decimal


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    order_number: str
    user_id: str
    status: OrderStatus
    payment_status: PaymentStatus
    subtotal: Decimal
    tax_amount: Decimal
    shipping_amount: Decimal
    total: Decimal
    currency: str
    notes: str | None = None
    shipping_address_id: str
    billing_address_id: str
    created_at: datetime
    lines: list[OrderLineResponse] = []


class PaginationResponse(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class OrderPageResponse(BaseModel):
    data: list[OrderResponse]
    pagination: PaginationResponse


class OrderStatsResponse(BaseModel):
    total_orders: int
    pending_orders: int
    completed_orders: int
    cancelled_orders: int
    total_revenue: Decimal
