"""Shared BDD fixtures and step definitions for settlement scenarios."""

import pytest
from ordering.order.order import Order
from payments.settlement.resolution import resolve_settlement
from pytest_bdd import given, parsers, then, when


@pytest.fixture()
def settlement():
    return {"order": None, "product_id": None, "applied": None}


def _settle(database, state, success):
    with database.transaction() as session:
        state["applied"] = resolve_settlement(session, state["order"].id, success)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse("a pending order for {quantity:d} units of a product with {stock:d} in stock"))
def _(settlement, checkout, make_product, make_address, put_in_cart, quantity, stock):
    settlement["product_id"] = make_product(quantity=stock)
    put_in_cart("user-1", settlement["product_id"], quantity)
    address_id = make_address("user-1")
    settlement["order"] = checkout.place_order("user-1", address_id, address_id)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the payment settles successfully")
def _(settlement, database):
    _settle(database, settlement, True)


@when("the payment is declined")
def _(settlement, database):
    _settle(database, settlement, False)


@when("the customer cancels the order")
def _(settlement, checkout):
    checkout.cancel_order("user-1", settlement["order"].id)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order is "{status}" with payment "{payment_status}"'))
def _(settlement, database, status, payment_status):
    with database.session() as session:
        order = session.get(Order, settlement["order"].id)
        assert (order.status, order.payment_status) == (status, payment_status)


@then(parsers.cfparse("the product has {quantity:d} units in stock"))
def _(settlement, stock_of, quantity):
    assert stock_of(settlement["product_id"]) == quantity


@then("the last settlement was ignored")
def _(settlement):
    assert settlement["applied"] is False
