import os
from decimal import Decimal
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pin STOREFRONT_ENV before any application module is imported."""
    os.environ["STOREFRONT_ENV"] = session.config.option.env
    os.environ.setdefault("PAYMENT_GATEWAY", "fake")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------
@pytest.fixture(scope="session")
def database(tmp_path_factory):
    """One file-backed SQLite database per session.

    A file (not :memory:) so worker threads get their own connections and
    real locking, like production.
    """
    from shared.database import Database
    from shared.utils.db import drop_db, setup_db

    db = Database(f"sqlite:///{tmp_path_factory.mktemp('db') / 'storefront.db'}")
    setup_db(db)

    yield db

    drop_db(db)
    db.dispose()


@pytest.fixture(autouse=True)
def run_around_tests(database):
    """Fixture to automatically cleanup infrastructure after every test"""
    yield

    from shared.utils.db import reset_db

    reset_db(database)


# ---------------------------------------------------------------------------
# Data builders
# ---------------------------------------------------------------------------
@pytest.fixture()
def make_product(database):
    from catalogue.product import Product

    def _make(price="10.00", quantity=5, track_quantity=True, is_active=True, name="Widget"):
        with database.transaction() as session:
            product = Product(
                name=name,
                price=Decimal(price),
                quantity=quantity,
                track_quantity=track_quantity,
                is_active=is_active,
            )
            session.add(product)
            session.flush()
            return product.id

    return _make


@pytest.fixture()
def make_address(database):
    from identity.address import Address

    def _make(user_id):
        with database.transaction() as session:
            address = Address(
                user_id=user_id,
                street="1 Main St",
                city="Springfield",
                state="IL",
                postal_code="62701",
                country="US",
            )
            session.add(address)
            session.flush()
            return address.id

    return _make


@pytest.fixture()
def put_in_cart(database):
    """Write a cart line directly, skipping the stock checks of add_to_cart."""
    from ordering.cart.cart import CartItem, get_or_create_cart

    def _put(user_id, product_id, quantity):
        with database.transaction() as session:
            cart = get_or_create_cart(session, user_id)
            item = CartItem(cart_id=cart.id, product_id=product_id, quantity=quantity)
            session.add(item)
            session.flush()
            return item.id

    return _put


@pytest.fixture()
def stock_of(database):
    from catalogue.product import Product

    def _stock(product_id):
        with database.session() as session:
            return session.get(Product, product_id).quantity

    return _stock


@pytest.fixture()
def checkout(database):
    from ordering.checkout.orchestrator import CheckoutService
    from ordering.order.assembly import OrderAssembler

    return CheckoutService(database, OrderAssembler(tax_rate=Decimal("0.08")))
