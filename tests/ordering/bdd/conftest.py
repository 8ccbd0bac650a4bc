"""Shared BDD fixtures and step definitions for checkout scenarios."""

import threading

import pytest
from catalogue.product import Product
from ordering.cart.snapshot import read_cart_snapshot
from ordering.order.order import Order
from pytest_bdd import given, parsers, then, when
from shared.errors import StorefrontError
from sqlalchemy import func, select


@pytest.fixture()
def world():
    return {"products": {}, "addresses": {}, "order": None, "error": None, "results": {}}


def _address_for(world, make_address, user):
    if user not in world["addresses"]:
        world["addresses"][user] = make_address(user)
    return world["addresses"][user]


def _attempt(world, action):
    world["error"] = None
    try:
        return action()
    except StorefrontError as exc:
        world["error"] = exc
        return None


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" priced {price} with {quantity:d} units in stock'))
def _(world, make_product, name, price, quantity):
    world["products"][name] = make_product(price=price, quantity=quantity)


@given(parsers.cfparse('"{user}" has {quantity:d} of "{name}" in the cart'))
def _(world, put_in_cart, user, quantity, name):
    put_in_cart(user, world["products"][name], quantity)


@given(parsers.cfparse('product "{name}" is deactivated'))
def _(world, database, name):
    with database.transaction() as session:
        session.get(Product, world["products"][name]).is_active = False


@given(parsers.cfparse('"{user}" has placed an order'))
def _(world, checkout, make_address, user):
    address_id = _address_for(world, make_address, user)
    world["order"] = checkout.place_order(user, address_id, address_id)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('"{user}" places an order'))
def _(world, checkout, make_address, user):
    address_id = _address_for(world, make_address, user)
    order = _attempt(world, lambda: checkout.place_order(user, address_id, address_id))
    if order is not None:
        world["order"] = order


@when(parsers.cfparse('"{first}" and "{second}" place orders at the same time'))
def _(world, checkout, make_address, first, second):
    users = [first, second]
    addresses = {user: _address_for(world, make_address, user) for user in users}
    barrier = threading.Barrier(len(users))

    def place(user):
        barrier.wait()
        try:
            world["results"][user] = checkout.place_order(user, addresses[user], addresses[user])
        except StorefrontError as exc:
            world["results"][user] = exc

    threads = [threading.Thread(target=place, args=(user,)) for user in users]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)


@when(parsers.cfparse('"{user}" cancels the order'))
def _(world, checkout, user):
    order = _attempt(world, lambda: checkout.cancel_order(user, world["order"].id))
    if order is not None:
        world["order"] = order


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the order subtotal is {amount}"))
def _(world, amount):
    assert str(world["order"].subtotal) == amount


@then(parsers.cfparse("the order tax is {amount}"))
def _(world, amount):
    assert str(world["order"].tax_amount) == amount


@then(parsers.cfparse("the order shipping is {amount}"))
def _(world, amount):
    assert str(world["order"].shipping_amount) == amount


@then(parsers.cfparse("the order total is {amount}"))
def _(world, amount):
    assert str(world["order"].total) == amount


@then(parsers.cfparse('the order status is "{status}"'))
def _(world, status):
    assert world["error"] is None
    assert world["order"].status == status


@then(parsers.cfparse('product "{name}" has {quantity:d} units in stock'))
def _(world, stock_of, name, quantity):
    assert stock_of(world["products"][name]) == quantity


@then(parsers.cfparse('"{user}" has an empty cart'))
def _(database, user):
    with database.session() as session:
        assert read_cart_snapshot(session, user).is_empty


@then(parsers.cfparse('"{user}" still has {count:d} line in the cart'))
def _(database, user, count):
    with database.session() as session:
        assert len(read_cart_snapshot(session, user).lines) == count


@then(parsers.cfparse('the checkout fails with "{code}"'))
def _(world, code):
    assert world["error"] is not None
    assert world["error"].code.value == code


@then("exactly one order is placed")
def _(world):
    assert sum(isinstance(result, Order) for result in world["results"].values()) == 1


@then(parsers.cfparse('the other checkout fails with "{code}"'))
def _(world, code):
    errors = [result for result in world["results"].values() if isinstance(result, StorefrontError)]
    assert len(errors) == 1
    assert errors[0].code.value == code


@then("no orders exist")
def _(database):
    with database.session() as session:
        assert session.scalar(select(func.count()).select_from(Order)) == 0
