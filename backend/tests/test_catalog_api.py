"""
Category and product API tests.

Reads are public; writes need an admin token.
"""

import pytest


class TestCategoriesApi:

    def test_public_list_without_pagination(self, client, category):
        resp = client.get("/api/categories")
        assert resp.status_code == 200
        names = [c["name"] for c in resp.get_json()["data"]["categories"]]
        assert names == ["Herbal Teas"]

    def test_list_with_pagination(self, client, container):
        for i in range(3):
            container.categories.create({"name": f"Cat {i}"})

        resp = client.get("/api/categories?page=1&limit=2")
        data = resp.get_json()["data"]
        assert len(data["items"]) == 2
        assert data["pagination"]["totalItems"] == 3
        assert data["pagination"]["hasNextPage"] is True

    def test_get_and_products(self, client, category, products):
        resp = client.get(f"/api/categories/{category.id}")
        assert resp.status_code == 200

        resp = client.get(f"/api/categories/{category.id}/products")
        assert resp.status_code == 200
        assert len(resp.get_json()["data"]["products"]) == 2

    def test_unknown_category(self, client):
        assert client.get("/api/categories/424242").status_code == 404
        assert client.get("/api/categories/424242/products").status_code == 404

    def test_admin_crud(self, client, admin_headers):
        resp = client.post(
            "/api/categories",
            json={"name": "Essential Oils", "description": "Aromatherapy"},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        category_id = resp.get_json()["data"]["category"]["id"]

        resp = client.put(
            f"/api/categories/{category_id}",
            json={"description": "Pure oils"},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        assert resp.get_json()["data"]["category"]["description"] == "Pure oils"

        resp = client.delete(f"/api/categories/{category_id}", headers=admin_headers)
        assert resp.status_code == 200
        assert client.get(f"/api/categories/{category_id}").status_code == 404

    def test_duplicate_name(self, client, admin_headers, category):
        resp = client.post("/api/categories", json={"name": category.name}, headers=admin_headers)
        assert resp.status_code == 409

    def test_delete_in_use(self, client, admin_headers, category, products):
        resp = client.delete(f"/api/categories/{category.id}", headers=admin_headers)
        assert resp.status_code == 409
        assert resp.get_json()["message"] == "Cannot delete category with existing products"


class TestProductsApi:

    def test_public_list(self, client, products):
        resp = client.get("/api/products")
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["pagination"]["totalItems"] == 3
        assert data["pagination"]["itemsPerPage"] == 10
        assert {p["price"] for p in data["items"]} == {"15.99", "12.99", "29.99"}

    def test_search_and_category_filter(self, client, category, products):
        resp = client.get(f"/api/products?search=tea&category_id={category.id}")
        names = {p["name"] for p in resp.get_json()["data"]["items"]}
        assert names == {"Chamomile Tea", "Green Tea"}

        resp = client.get("/api/products?search=lavender")
        assert [p["name"] for p in resp.get_json()["data"]["items"]] == ["Lavender Oil"]

    def test_invalid_category_filter(self, client):
        resp = client.get("/api/products?category_id=abc")
        assert resp.status_code == 400

    def test_get(self, client, products):
        resp = client.get(f"/api/products/{products[0].id}")
        assert resp.status_code == 200
        assert resp.get_json()["data"]["product"]["name"] == "Chamomile Tea"

    def test_get_unknown(self, client):
        resp = client.get("/api/products/424242")
        assert resp.status_code == 404
        assert resp.get_json()["message"] == "Product not found"

    def test_admin_create(self, client, admin_headers, category):
        resp = client.post(
            "/api/products",
            json={"name": "Rooibos", "price": 9.99, "stock": 12, "category_id": category.id},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        product = resp.get_json()["data"]["product"]
        assert product["price"] == "9.99"
        assert product["stock"] == 12
        assert product["category_id"] == category.id

    @pytest.mark.parametrize("payload", [
        {"price": 1},
        {"name": "X", "price": -1},
        {"name": "X", "price": 1, "stock": -1},
        {"name": "X", "price": 1, "category_id": 424242},
        {"name": "X", "price": 1, "sku": "not-a-field"},
        {"name": "X", "price": 1e30},
        {"name": "X", "price": "1e30"},
        {"name": "X", "price": 1, "stock": 2 ** 40},
        {"name": "X", "price": 1, "category_id": 10 ** 20},
    ])
    def test_admin_create_invalid(self, client, admin_headers, payload):
        resp = client.post("/api/products", json=payload, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.get_json()["errors"]

    def test_admin_update(self, client, admin_headers, products):
        resp = client.put(
            f"/api/products/{products[0].id}",
            json={"stock": 5, "price": "14.50"},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        product = resp.get_json()["data"]["product"]
        assert product["stock"] == 5
        assert product["price"] == "14.50"

    def test_admin_delete(self, client, admin_headers, products):
        resp = client.delete(f"/api/products/{products[2].id}", headers=admin_headers)
        assert resp.status_code == 200
        assert client.get(f"/api/products/{products[2].id}").status_code == 404

    def test_delete_ordered_product(self, client, admin_headers, container, customer, products):
        container.order_workflow.create(
            customer.id, [{"product_id": products[0].id, "quantity": 1, "price": 15.99}]
        )
        resp = client.delete(f"/api/products/{products[0].id}", headers=admin_headers)
        assert resp.status_code == 409

    def test_page_past_end(self, client, products):
        resp = client.get("/api/products?page=5&limit=2")
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["items"] == []
        assert data["pagination"]["totalItems"] == 3
        assert data["pagination"]["totalPages"] == 2
        assert data["pagination"]["hasNextPage"] is False
        assert data["pagination"]["hasPrevPage"] is True

    def test_round_trip(self, client, admin_headers):
        created = client.post("/api/products", json={"name": "Sage", "price": "4.00"}, headers=admin_headers)
        product_id = created.get_json()["data"]["product"]["id"]

        assert client.get(f"/api/products/{product_id}").get_json()["data"]["product"]["stock"] == 0

        client.put(f"/api/products/{product_id}", json={"name": "White Sage"}, headers=admin_headers)
        assert client.get(f"/api/products/{product_id}").get_json()["data"]["product"]["name"] == "White Sage"

        client.delete(f"/api/products/{product_id}", headers=admin_headers)
        assert client.get(f"/api/products/{product_id}").status_code == 404

    def test_page_beyond_integer_range(self, client, products):
        resp = client.get("/api/products?page=99999999999999999999&limit=10")
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["items"] == []
        assert data["pagination"]["totalItems"] == 3
        assert data["pagination"]["hasNextPage"] is False

    def test_update_with_out_of_range_price(self, client, admin_headers, products):
        resp = client.put(f"/api/products/{products[0].id}", json={"price": "1e30"}, headers=admin_headers)
        assert resp.status_code == 400
        assert client.get(f"/api/products/{products[0].id}").get_json()["data"]["product"]["price"] == "15.99"

    def test_ids_beyond_integer_range(self, client, products):
        assert client.get("/api/products/99999999999999999999").status_code == 404
        assert client.get("/api/categories/99999999999999999999").status_code == 404

        resp = client.get("/api/products?category_id=99999999999999999999")
        assert resp.status_code == 200
        assert resp.get_json()["data"]["items"] == []
