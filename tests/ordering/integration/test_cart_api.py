"""Integration tests for cart endpoints via TestClient."""


def as_user(user_id):
    return {"X-User-Id": user_id}


class TestCartAPI:
    def test_requires_user_header(self, client):
        assert client.get("/cart").status_code == 401

    def test_add_and_summarise(self, client, make_product):
        product_id = make_product(price="3.30", quantity=10)

        response = client.post("/cart/items", json={"product_id": product_id, "quantity": 3}, headers=as_user("u1"))
        assert response.status_code == 201
        assert response.json()["quantity"] == 3

        summary = client.get("/cart", headers=as_user("u1")).json()
        assert summary["item_count"] == 3
        assert summary["subtotal"] == "9.90"
        assert summary["items"][0]["price"] == "3.30"

    def test_add_beyond_stock(self, client, make_product):
        product_id = make_product(quantity=1)
        response = client.post("/cart/items", json={"product_id": product_id, "quantity": 2}, headers=as_user("u1"))
        assert response.status_code == 400
        assert response.json()["code"] == "INSUFFICIENT_STOCK"

    def test_add_unknown_product(self, client):
        response = client.post("/cart/items", json={"product_id": "missing"}, headers=as_user("u1"))
        assert response.status_code == 404
        assert response.json()["code"] == "PRODUCT_NOT_FOUND"

    def test_update_and_remove_line(self, client, make_product):
        product_id = make_product(quantity=10)
        item_id = client.post(
            "/cart/items", json={"product_id": product_id, "quantity": 1}, headers=as_user("u1")
        ).json()["id"]

        updated = client.patch(f"/cart/items/{item_id}", json={"quantity": 4}, headers=as_user("u1"))
        assert updated.json()["quantity"] == 4

        assert client.delete(f"/cart/items/{item_id}", headers=as_user("u2")).status_code == 404
        assert client.delete(f"/cart/items/{item_id}", headers=as_user("u1")).status_code == 204
        assert client.get("/cart", headers=as_user("u1")).json()["items"] == []

    def test_clear(self, client, make_product):
        client.post("/cart/items", json={"product_id": make_product()}, headers=as_user("u1"))
        assert client.delete("/cart", headers=as_user("u1")).status_code == 204
        assert client.get("/cart", headers=as_user("u1")).json()["item_count"] == 0

    def test_validation_reports_issues(self, client, make_product, put_in_cart):
        put_in_cart("u1", make_product(quantity=1), 2)
        put_in_cart("u1", "ghost-product", 1)

        body = client.get("/cart/validation", headers=as_user("u1")).json()

        assert body["valid"] is False
        assert sorted(issue["code"] for issue in body["issues"]) == ["INSUFFICIENT_STOCK", "PRODUCT_MISSING"]

    def test_validation_of_good_cart(self, client, make_product, put_in_cart):
        put_in_cart("u1", make_product(quantity=5), 5)
        assert client.get("/cart/validation", headers=as_user("u1")).json() == {"valid": True, "issues": []}
