"""HTTP tests for /api/products and /health."""


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "OK"


def test_list_products_price_range(client, catalog):
    response = client.get(
        "/api/products",
        params={"minPrice": 100, "maxPrice": 500, "sort": "price", "order": "desc", "limit": 2, "offset": 0},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert [p["name"] for p in body["data"]] == ["Linen Sofa", "Armchair"]
    assert [p["price"] for p in body["data"]] == [450.0, 300.0]
    assert body["pagination"] == {"total": 5, "limit": 2, "offset": 0, "hasMore": True}


def test_list_products_projection(client, catalog):
    body = client.get("/api/products", params={"category": "living-room", "sort": "id"}).json()

    armchair = next(p for p in body["data"] if p["slug"] == "armchair")
    assert armchair["category"] == "living-room"
    assert armchair["categories"]["name"] == "Living Room"
    assert armchair["inStock"] is False


def test_list_products_rejects_unknown_sort(client, catalog):
    response = client.get("/api/products", params={"sort": "password"})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Validation failed"
    assert body["details"][0]["field"].endswith("sort")


def test_product_cache_header_outside_production(client, catalog):
    response = client.get("/api/products")

    assert response.headers["Cache-Control"] == "no-store"


def test_get_product_and_missing(client, catalog):
    found = client.get(f"/api/products/{catalog['lamp']}")
    missing = client.get("/api/products/9999")

    assert found.json()["data"]["name"] == "Lamp"
    assert missing.status_code == 404
    assert missing.json() == {"success": False, "error": "Not found", "message": "Product not found"}


def test_categories_and_featured(client, catalog):
    categories = client.get("/api/products/categories").json()["data"]
    featured = client.get("/api/products/featured", params={"limit": 5}).json()["data"]

    assert {c["slug"] for c in categories} == {"living-room", "lighting"}
    assert {p["slug"] for p in featured} == {"oak-table", "linen-sofa", "chandelier"}


def test_search_requires_query(client, catalog):
    response = client.get("/api/products/search")

    assert response.status_code == 400
    assert response.json()["message"] == "Please provide a search query"


def test_search_by_tag(client, catalog):
    body = client.get("/api/products/search", params={"q": "fabric"}).json()

    assert body["query"] == "fabric"
    assert body["pagination"]["total"] == 2
    assert {p["slug"] for p in body["data"]} == {"linen-sofa", "armchair"}


def test_create_update_delete_product(client, catalog):
    created = client.post(
        "/api/products",
        json={"name": "Walnut Desk", "price": 330, "stock": 5, "category": "living-room", "tags": ["wood"]},
    )
    assert created.status_code == 201
    product = created.json()["data"]
    assert product["slug"] == "walnut-desk"
    assert product["category"] == "living-room"

    updated = client.put(f"/api/products/{product['id']}", json={"inStock": False})
    assert updated.status_code == 200
    assert updated.json()["data"]["stock"] == 0

    deleted = client.delete(f"/api/products/{product['id']}")
    assert deleted.status_code == 200
    assert client.get(f"/api/products/{product['id']}").status_code == 404


def test_create_duplicate_slug_conflicts(client, catalog):
    response = client.post("/api/products", json={"name": "Lamp", "price": 10})

    assert response.status_code == 409
    assert response.json()["message"] == "Product with this slug already exists"


def test_create_rejects_unknown_fields(client, catalog):
    response = client.post("/api/products", json={"name": "Stool", "price": 10, "owner": "me"})

    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"


def test_update_with_stock_and_in_stock_is_rejected(client, catalog):
    response = client.put(f"/api/products/{catalog['lamp']}", json={"stock": 4, "inStock": True})

    assert response.status_code == 400


def test_update_stock_endpoint(client, catalog):
    response = client.put(
        f"/api/products/{catalog['bookshelf']}/stock",
        json={"quantity": 10, "operation": "subtract"},
    )

    assert response.status_code == 200
    assert response.json()["data"]["stock"] == 0
    assert response.json()["data"]["inStock"] is False


def test_unknown_route(client):
    response = client.get("/api/nothing-here")

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Route not found"}


def test_create_with_unknown_category_id(client, catalog):
    response = client.post("/api/products", json={"name": "Brand New Desk", "price": 10, "category_id": 9999})

    assert response.status_code == 400
    assert response.json()["message"] == "Category 9999 does not exist"
