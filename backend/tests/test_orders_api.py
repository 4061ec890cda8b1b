"""
Order API tests.

Verifies:
- Customers create and list their own orders
- Admin-only listing, status updates and deletes
- Failed item writes surface as 500 with the compensation report
"""

from sqlalchemy.exc import SQLAlchemyError


def _order_payload(products):
    return {
        "items": [
            {"product_id": products[0].id, "quantity": 2, "price": 15.99},
            {"product_id": products[1].id, "quantity": 1, "price": 15.99},
        ]
    }


class TestCreateOrder:

    def test_create(self, client, customer, customer_headers, products):
        resp = client.post("/api/orders", json=_order_payload(products), headers=customer_headers)
        assert resp.status_code == 201

        order = resp.get_json()["data"]["order"]
        assert order["user_id"] == customer.id
        assert order["status"] == "pending"
        assert order["total_amount"] == "47.97"
        assert len(order["items"]) == 2

    def test_empty_items(self, client, customer_headers):
        resp = client.post("/api/orders", json={"items": []}, headers=customer_headers)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Order must have at least one item"

    def test_invalid_item_fields(self, client, customer_headers, products):
        resp = client.post(
            "/api/orders",
            json={"items": [{"product_id": products[0].id, "quantity": -1, "price": 1}]},
            headers=customer_headers,
        )
        assert resp.status_code == 400
        assert resp.get_json()["errors"] == [
            {"field": "items[0].quantity", "message": "Invalid quantity value"}
        ]

    def test_out_of_range_price_rejected_before_write(self, client, container, customer, customer_headers, products):
        resp = client.post(
            "/api/orders",
            json={"items": [{"product_id": products[0].id, "quantity": 1, "price": "1e30"}]},
            headers=customer_headers,
        )
        assert resp.status_code == 400
        assert resp.get_json()["errors"] == [
            {"field": "items[0].price", "message": "Invalid price value"}
        ]
        _, total = container.order_workflow.list(1, 10, user_id=customer.id)
        assert total == 0

    def test_oversized_item_numbers_rejected(self, client, customer_headers, products):
        resp = client.post(
            "/api/orders",
            json={"items": [
                {"product_id": 10 ** 20, "quantity": 1, "price": 1},
                {"product_id": products[0].id, "quantity": 10 ** 20, "price": 0},
            ]},
            headers=customer_headers,
        )
        assert resp.status_code == 400
        assert resp.get_json()["errors"] == [
            {"field": "items[0].product_id", "message": "Invalid product_id value"},
            {"field": "items[1].quantity", "message": "Invalid quantity value"},
        ]

    def test_unknown_product(self, client, customer_headers):
        resp = client.post(
            "/api/orders",
            json={"items": [{"product_id": 424242, "quantity": 1, "price": 1}]},
            headers=customer_headers,
        )
        assert resp.status_code == 400

    def test_item_write_failure_is_compensated(self, client, container, monkeypatch,
                                               customer_headers, products):
        def failing_insert_items(order_id, items, *, commit=True):
            raise SQLAlchemyError("simulated")

        monkeypatch.setattr(container.orders, "insert_items", failing_insert_items)

        resp = client.post("/api/orders", json=_order_payload(products), headers=customer_headers)
        assert resp.status_code == 500

        body = resp.get_json()
        assert body["success"] is False
        report = body["errors"][0]
        assert report["compensation"] == "succeeded"
        assert container.orders.get_by_id(report["removed_order_id"]) is None


class TestListOrders:

    def test_own_orders(self, client, container, customer, other_customer, customer_headers, products):
        workflow = container.order_workflow
        workflow.create(customer.id, _order_payload(products)["items"])
        workflow.create(other_customer.id, _order_payload(products)["items"])

        resp = client.get("/api/orders", headers=customer_headers)
        data = resp.get_json()["data"]
        assert data["pagination"]["totalItems"] == 1
        assert data["items"][0]["user_id"] == customer.id

    def test_admin_lists_all(self, client, container, customer, other_customer, admin_headers, products):
        workflow = container.order_workflow
        workflow.create(customer.id, _order_payload(products)["items"])
        workflow.create(other_customer.id, _order_payload(products)["items"])

        resp = client.get("/api/orders/all", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.get_json()["data"]["pagination"]["totalItems"] == 2


class TestAdminOrderManagement:

    def test_update_status(self, client, container, customer, admin_headers, products):
        order = container.order_workflow.create(customer.id, _order_payload(products)["items"])

        resp = client.put(f"/api/orders/{order.order.id}", json={"status": "shipped"}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.get_json()["data"]["order"]["status"] == "shipped"

    def test_status_required(self, client, container, customer, admin_headers, products):
        order = container.order_workflow.create(customer.id, _order_payload(products)["items"])

        resp = client.put(f"/api/orders/{order.order.id}", json={}, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Status is required"

    def test_invalid_status(self, client, container, customer, admin_headers, products):
        order = container.order_workflow.create(customer.id, _order_payload(products)["items"])

        resp = client.put(f"/api/orders/{order.order.id}", json={"status": "lost"}, headers=admin_headers)
        assert resp.status_code == 400

    def test_customer_cannot_update(self, client, container, customer, customer_headers, products):
        order = container.order_workflow.create(customer.id, _order_payload(products)["items"])

        resp = client.put(f"/api/orders/{order.order.id}", json={"status": "cancelled"}, headers=customer_headers)
        assert resp.status_code == 403

    def test_delete(self, client, container, customer, admin_headers, products):
        order = container.order_workflow.create(customer.id, _order_payload(products)["items"])
        order_id = order.order.id

        resp = client.delete(f"/api/orders/{order_id}", headers=admin_headers)
        assert resp.status_code == 200
        assert client.get(f"/api/orders/{order_id}", headers=admin_headers).status_code == 404
        assert container.orders.get_items(order_id) == []

    def test_delete_unknown(self, client, admin_headers):
        assert client.delete("/api/orders/424242", headers=admin_headers).status_code == 404

    def test_order_id_beyond_integer_range(self, client, admin_headers):
        resp = client.get("/api/orders/99999999999999999999", headers=admin_headers)
        assert resp.status_code == 404
        assert client.delete("/api/orders/99999999999999999999", headers=admin_headers).status_code == 404
