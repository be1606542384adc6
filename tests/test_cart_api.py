"""HTTP tests for /api/cart."""

from tests.conftest import OTHER_USER, USER


def test_cart_requires_identity(client, catalog):
    response = client.get("/api/cart")

    assert response.status_code == 401
    assert response.json()["error"] == "User not authenticated"


def test_empty_cart(client, catalog):
    body = client.get("/api/cart", headers=USER).json()

    assert body["success"] is True
    assert body["data"] == {"items": [], "total": 0, "count": 0}


def test_add_same_product_merges_quantity(client, catalog):
    lamp = catalog["lamp"]

    first = client.post("/api/cart", json={"productId": lamp, "quantity": 2}, headers=USER)
    second = client.post("/api/cart", json={"productId": lamp, "quantity": 3}, headers=USER)

    assert first.status_code == 200
    assert second.json()["data"]["id"] == first.json()["data"]["id"]
    assert second.json()["data"]["quantity"] == 5

    cart = client.get("/api/cart", headers=USER).json()["data"]
    assert len(cart["items"]) == 1
    assert cart["count"] == 5
    assert cart["total"] == 249.95


def test_added_line_carries_catalog_data(client, catalog):
    line = client.post("/api/cart", json={"productId": catalog["oak-table"]}, headers=USER).json()["data"]

    assert line["productId"] == catalog["oak-table"]
    assert line["quantity"] == 1
    assert line["price"] == 120.0
    assert line["name"] == "Oak Table"
    assert line["image"] == "/images/oak-table.jpg"


def test_add_unknown_product(client, catalog):
    response = client.post("/api/cart", json={"productId": 9999, "quantity": 1}, headers=USER)

    assert response.status_code == 404
    assert response.json()["message"] == "Product not found"


def test_add_rejects_bad_quantity(client, catalog):
    response = client.post("/api/cart", json={"productId": catalog["lamp"], "quantity": 0}, headers=USER)

    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"


def test_update_quantity(client, catalog):
    client.post("/api/cart", json={"productId": catalog["lamp"]}, headers=USER)

    response = client.put(f"/api/cart/{catalog['lamp']}", json={"quantity": 4}, headers=USER)

    assert response.status_code == 200
    assert response.json()["data"]["quantity"] == 4


def test_update_quantity_zero_is_rejected(client, catalog):
    client.post("/api/cart", json={"productId": catalog["lamp"]}, headers=USER)

    response = client.put(f"/api/cart/{catalog['lamp']}", json={"quantity": 0}, headers=USER)

    assert response.status_code == 400


def test_update_missing_line(client, catalog):
    response = client.put(f"/api/cart/{catalog['lamp']}", json={"quantity": 2}, headers=USER)

    assert response.status_code == 404
    assert response.json()["message"] == "Cart item not found"


def test_remove_item_and_missing_line(client, catalog):
    client.post("/api/cart", json={"productId": catalog["lamp"]}, headers=USER)

    removed = client.delete(f"/api/cart/{catalog['lamp']}", headers=USER)
    again = client.delete(f"/api/cart/{catalog['lamp']}", headers=USER)

    assert removed.status_code == 200
    assert removed.json()["data"]["productId"] == catalog["lamp"]
    assert again.status_code == 404


def test_clear_and_summary(client, catalog):
    client.post("/api/cart", json={"productId": catalog["lamp"], "quantity": 2}, headers=USER)
    client.post("/api/cart", json={"productId": catalog["oak-table"]}, headers=USER)

    summary = client.get("/api/cart/summary", headers=USER).json()["data"]
    assert summary == {"total": 219.98, "items": 3, "formatted": "$219.98"}

    cleared = client.delete("/api/cart", headers=USER)
    assert cleared.json()["message"] == "Cart cleared successfully"
    assert client.get("/api/cart", headers=USER).json()["data"]["items"] == []


def test_carts_are_isolated_per_user(client, catalog):
    client.post("/api/cart", json={"productId": catalog["lamp"]}, headers=USER)

    assert client.get("/api/cart", headers=OTHER_USER).json()["data"]["items"] == []
