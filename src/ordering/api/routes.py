"""FastAPI routes for the Ordering domain: cart, checkout and orders.

Handlers are plain ``def`` so FastAPI runs them in its threadpool; every
database call they make is blocking.
"""

from fastapi import APIRouter, Depends, Query, Response

from ordering.api.schemas import (
    AddToCartRequest,
    CartItemResponse,
    CartSummaryResponse,
    CartValidationResponse,
    OrderPageResponse,
    OrderResponse,
    OrderStatsResponse,
    PaginationResponse,
    PlaceOrderRequest,
    UpdateCartItemRequest,
    UpdateOrderStatusRequest,
)
from ordering.cart.management import add_to_cart, clear_cart, get_cart_summary, remove_from_cart, update_cart_item
from ordering.checkout.orchestrator import CheckoutService
from ordering.order.order import OrderStatus, PaymentStatus
from ordering.order.queries import Page, get_order, get_order_by_number, list_all_orders, list_orders, order_stats
from ordering.order.status import update_order_status
from shared.api import current_user_id, get_checkout, get_database, require_admin
from shared.database import Database


def _page_response(page: Page) -> OrderPageResponse:
    return OrderPageResponse(
        data=[OrderResponse.model_validate(order) for order in page.items],
        pagination=PaginationResponse(
            page=page.page,
            limit=page.limit,
            total=page.total,
            total_pages=page.total_pages,
        ),
    )


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartSummaryResponse)
def get_cart(user_id: str = Depends(current_user_id), database: Database = Depends(get_database)):
    with database.session() as session:
        return CartSummaryResponse(**get_cart_summary(session, user_id))


@cart_router.post("/items", status_code=201, response_model=CartItemResponse)
def add_cart_item(
    body: AddToCartRequest,
    user_id: str = Depends(current_user_id),
    database: Database = Depends(get_database),
):
    with database.transaction() as session:
        item = add_to_cart(session, user_id, body.product_id, body.quantity)
        return CartItemResponse.model_validate(item)


@cart_router.patch("/items/{item_id}", response_model=CartItemResponse)
def update_cart_line(
    item_id: str,
    body: UpdateCartItemRequest,
    user_id: str = Depends(current_user_id),
    database: Database = Depends(get_database),
):
    with database.transaction() as session:
        item = update_cart_item(session, user_id, item_id, body.quantity)
        return CartItemResponse.model_validate(item)


@cart_router.delete("/items/{item_id}", status_code=204)
def remove_cart_line(
    item_id: str,
    user_id: str = Depends(current_user_id),
    database: Database = Depends(get_database),
):
    with database.transaction() as session:
        remove_from_cart(session, user_id, item_id)
    return Response(status_code=204)


@cart_router.delete("", status_code=204)
def empty_cart(user_id: str = Depends(current_user_id), database: Database = Depends(get_database)):
    with database.transaction() as session:
        clear_cart(session, user_id)
    return Response(status_code=204)


@cart_router.get("/validation", response_model=CartValidationResponse)
def validate_cart(user_id: str = Depends(current_user_id), checkout: CheckoutService = Depends(get_checkout)):
    """Check every cart line against live stock without reserving anything."""
    validation = checkout.validate_cart(user_id)
    return CartValidationResponse(valid=validation.valid, issues=[issue.to_dict() for issue in validation.issues])


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
def place_order(
    body: PlaceOrderRequest,
    user_id: str = Depends(current_user_id),
    checkout: CheckoutService = Depends(get_checkout),
):
    """Place an order from the caller's cart.

    The order comes back PENDING; payment settles in the background.
    """
    order = checkout.place_order(
        user_id=user_id,
        shipping_address_id=body.shipping_address_id,
        billing_address_id=body.billing_address_id,
        notes=body.notes,
    )
    return OrderResponse.model_validate(order)


@order_router.get("", response_model=OrderPageResponse)
def my_orders(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    user_id: str = Depends(current_user_id),
    database: Database = Depends(get_database),
):
    with database.session() as session:
        return _page_response(list_orders(session, user_id, page, limit))


@order_router.get("/number/{order_number}", response_model=OrderResponse)
def order_by_number(
    order_number: str,
    user_id: str = Depends(current_user_id),
    database: Database = Depends(get_database),
):
    with database.session() as session:
        return OrderResponse.model_validate(get_order_by_number(session, order_number, user_id=user_id))


@order_router.get("/{order_id}", response_model=OrderResponse)
def order_detail(
    order_id: str,
    user_id: str = Depends(current_user_id),
    database: Database = Depends(get_database),
):
    with database.session() as session:
        return OrderResponse.model_validate(get_order(session, order_id, user_id=user_id))


@order_router.post("/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(
    order_id: str,
    user_id: str = Depends(current_user_id),
    checkout: CheckoutService = Depends(get_checkout),
):
    return OrderResponse.model_validate(checkout.cancel_order(user_id, order_id))


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/admin/orders", tags=["admin"], dependencies=[Depends(require_admin)])


@admin_router.get("", response_model=OrderPageResponse)
def all_orders(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    status: OrderStatus | None = None,
    payment_status: PaymentStatus | None = None,
    database: Database = Depends(get_database),
):
    with database.session() as session:
        return _page_response(list_all_orders(session, page, limit, status=status, payment_status=payment_status))


@admin_router.get("/stats", response_model=OrderStatsResponse)
def stats(database: Database = Depends(get_database)):
    with database.session() as session:
        return OrderStatsResponse(**order_stats(session))


@admin_router.put("/{order_id}/status", response_model=OrderResponse)
def set_order_status(
    order_id: str,
    body: UpdateOrderStatusRequest,
    database: Database = Depends(get_database),
):
    with database.transaction() as session:
        update_order_status(session, order_id, status=body.status, payment_status=body.payment_status)
        return OrderResponse.model_validate(get_order(session, order_id))
