"""Application tests for cart snapshots and cart validation."""

from decimal import Decimal

from catalogue.product import Product
from ordering.cart.snapshot import read_cart_snapshot
from ordering.cart.validation import IssueCode, validate_cart


class TestCartSnapshot:
    def test_no_cart_is_empty(self, database):
        with database.session() as session:
            snapshot = read_cart_snapshot(session, "nobody")
        assert snapshot.is_empty
        assert snapshot.cart_id is None

    def test_lines_carry_current_price(self, database, make_product, put_in_cart):
        product_id = make_product(price="12.34")
        item_id = put_in_cart("user-1", product_id, 2)

        with database.session() as session:
            snapshot = read_cart_snapshot(session, "user-1")

        assert len(snapshot.lines) == 1
        line = snapshot.lines[0]
        assert (line.item_id, line.product_id, line.quantity) == (item_id, product_id, 2)
        assert line.unit_price == Decimal("12.34")
        assert snapshot.item_ids == [item_id]

    def test_missing_product_has_no_price(self, database, put_in_cart):
        put_in_cart("user-1", "ghost-product", 1)
        with database.session() as session:
            snapshot = read_cart_snapshot(session, "user-1")
        assert snapshot.lines[0].unit_price is None


class TestValidateCart:
    def _validate(self, database, user_id="user-1"):
        with database.session() as session:
            return validate_cart(session, read_cart_snapshot(session, user_id))

    def test_valid_cart(self, database, make_product, put_in_cart):
        put_in_cart("user-1", make_product(quantity=5), 5)
        result = self._validate(database)
        assert result.valid
        assert result.issues == []

    def test_missing_product(self, database, put_in_cart):
        item_id = put_in_cart("user-1", "ghost-product", 1)
        result = self._validate(database)

        assert not result.valid
        assert len(result.issues) == 1
        issue = result.issues[0]
        assert issue.code == IssueCode.PRODUCT_MISSING.value
        assert issue.item_id == item_id
        assert issue.detail == "Product no longer exists"

    def test_inactive_product(self, database, make_product, put_in_cart):
        put_in_cart("user-1", make_product(is_active=False), 1)
        result = self._validate(database)
        assert [i.code for i in result.issues] == [IssueCode.PRODUCT_INACTIVE.value]
        assert result.issues[0].detail == "Product is no longer available"

    def test_insufficient_stock_reports_remaining(self, database, make_product, put_in_cart):
        put_in_cart("user-1", make_product(quantity=2), 3)
        result = self._validate(database)
        assert [i.code for i in result.issues] == [IssueCode.INSUFFICIENT_STOCK.value]
        assert result.issues[0].detail == "Only 2 items available"
        assert result.stock_only

    def test_inactive_and_short_reports_only_first_issue(self, database, make_product, put_in_cart):
        put_in_cart("user-1", make_product(quantity=0, is_active=False), 4)
        result = self._validate(database)
        assert [i.code for i in result.issues] == [IssueCode.PRODUCT_INACTIVE.value]
        assert not result.stock_only

    def test_untracked_product_ignores_quantity(self, database, make_product, put_in_cart):
        put_in_cart("user-1", make_product(quantity=0, track_quantity=False), 100)
        assert self._validate(database).valid

    def test_one_issue_per_bad_line(self, database, make_product, put_in_cart):
        put_in_cart("user-1", make_product(quantity=10), 1)
        put_in_cart("user-1", make_product(quantity=1), 2)
        put_in_cart("user-1", "ghost-product", 1)

        result = self._validate(database)
        assert sorted(i.code for i in result.issues) == [
            IssueCode.INSUFFICIENT_STOCK.value,
            IssueCode.PRODUCT_MISSING.value,
        ]

    def test_validation_does_not_write(self, database, make_product, put_in_cart, stock_of):
        product_id = make_product(quantity=1)
        put_in_cart("user-1", product_id, 3)

        self._validate(database)
        self._validate(database)

        assert stock_of(product_id) == 1
        with database.session() as session:
            assert session.get(Product, product_id).is_active
