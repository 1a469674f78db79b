"""
End-to-end API flows: sale, rental, return and employee administration.
"""

from datetime import timedelta

from rentpos.time_utils import today

PHONE = "5551234567"
CARD = {"method": "card", "card_number": "4111111111111111"}


def _add(client, headers, prefix, cart, product_id, quantity=1):
    resp = client.post(
        f"/api/{prefix}/cart/items",
        json={"cart": cart, "product_id": product_id, "quantity": quantity},
        headers=headers,
    )
    return resp


def _rent(client, headers, *product_ids):
    cart = None
    for product_id in product_ids:
        cart = _add(client, headers, "rentals", cart, product_id).json["cart"]
    resp = client.post(
        "/api/rentals/checkout",
        json={
            "phone": PHONE,
            "cart": cart,
            "return_date": (today() + timedelta(days=7)).isoformat(),
            "payment": CARD,
        },
        headers=headers,
    )
    assert resp.status_code == 201, resp.json
    return resp.json


class TestSaleFlow:

    def test_cart_coupon_checkout(self, client, catalog, cashier_headers):
        cart = _add(client, cashier_headers, "sales", None, "1000", 2).json["cart"]
        resp = _add(client, cashier_headers, "sales", cart, "1000", 1)
        assert resp.status_code == 200
        cart = resp.json["cart"]
        assert cart["lines"] == [{
            "product_id": "1000",
            "name": "Potato",
            "unit_price": "1",
            "quantity": 3,
            "line_total": "3",
        }]

        resp = client.post(
            "/api/sales/coupon", json={"cart": cart, "coupon_code": "c10"}, headers=cashier_headers
        )
        assert resp.status_code == 200
        assert resp.json["coupon"]["valid"] is True
        assert resp.json["summary"]["total"] == "2.862"

        resp = client.post(
            "/api/sales/checkout",
            json={"cart": cart, "coupon_code": "c10", "payment": {"method": "cash", "cash_received": "10"}},
            headers=cashier_headers,
        )
        assert resp.status_code == 201
        body = resp.json
        assert body["transaction"]["total"] == "2.862"
        assert body["tender"]["change"] == "7.138"

        totals = {t["label"]: t["amount"] for t in body["receipt"]["totals"]}
        assert totals == {"Subtotal": "3.00", "Discount": "-0.30", "Tax": "0.16", "Total": "2.86"}
        assert body["receipt"]["title"] == "Sales Receipt"
        assert "Sales Receipt" in body["receipt_text"]

        stock = client.get("/api/products/1000", headers=cashier_headers).json["product"]["stock"]
        assert stock == 246

    def test_invalid_coupon_reported_not_applied(self, client, catalog, cashier_headers):
        cart = _add(client, cashier_headers, "sales", None, "1000", 3).json["cart"]
        resp = client.post(
            "/api/sales/coupon", json={"cart": cart, "coupon_code": "X1"}, headers=cashier_headers
        )
        assert resp.status_code == 200
        assert resp.json["coupon"]["valid"] is False
        assert resp.json["summary"]["discount"] == "0"

    def test_add_more_than_stock(self, client, low_stock, cashier_headers):
        resp = _add(client, cashier_headers, "sales", None, "9000", 6)
        assert resp.status_code == 409
        assert resp.json["details"]["available"] == 5

    def test_unknown_product(self, client, catalog, cashier_headers):
        resp = _add(client, cashier_headers, "sales", None, "4242")
        assert resp.status_code == 404

    def test_remove_line(self, client, catalog, cashier_headers):
        cart = _add(client, cashier_headers, "sales", None, "1000").json["cart"]
        cart = _add(client, cashier_headers, "sales", cart, "2000").json["cart"]
        resp = client.post(
            "/api/sales/cart/remove", json={"cart": cart, "product_id": "1000"}, headers=cashier_headers
        )
        assert [line["product_id"] for line in resp.json["cart"]["lines"]] == ["2000"]

    def test_checkout_without_payment(self, client, catalog, cashier_headers):
        cart = _add(client, cashier_headers, "sales", None, "1000").json["cart"]
        resp = client.post("/api/sales/checkout", json={"cart": cart}, headers=cashier_headers)
        assert resp.status_code == 400


class TestRentalAndReturnFlow:

    def test_customer_verification_registers_once(self, client, catalog, cashier_headers):
        first = client.post("/api/rentals/customer", json={"phone": PHONE}, headers=cashier_headers)
        second = client.post("/api/rentals/customer", json={"phone": "(555) 123-4567"}, headers=cashier_headers)

        assert first.status_code == 201
        assert second.status_code == 200
        assert second.json["customer"]["id"] == first.json["customer"]["id"]

    def test_bad_phone(self, client, catalog, cashier_headers):
        resp = client.post("/api/rentals/customer", json={"phone": "12345"}, headers=cashier_headers)
        assert resp.status_code == 400

    def test_past_return_date(self, client, catalog, cashier_headers):
        cart = _add(client, cashier_headers, "rentals", None, "1000").json["cart"]
        resp = client.post(
            "/api/rentals/checkout",
            json={
                "phone": PHONE,
                "cart": cart,
                "return_date": (today() - timedelta(days=1)).isoformat(),
                "payment": CARD,
            },
            headers=cashier_headers,
        )
        assert resp.status_code == 400

    def test_rent_then_return_on_time(self, client, catalog, cashier_headers):
        rented = _rent(client, cashier_headers, "1000", "1009")
        assert rented["rental"]["status"] == "active"
        assert rented["receipt"]["title"] == "Rental Receipt"

        lookup = client.post("/api/returns/lookup", json={"phone": PHONE}, headers=cashier_headers)
        assert lookup.status_code == 200
        items = lookup.json["items"]
        assert {i["product_id"] for i in items} == {"1000", "1009"}
        assert all(i["days_late"] == 0 for i in items)

        selection = {"phone": PHONE, "rental_item_ids": [items[0]["rental_item_id"]]}
        quote = client.post("/api/returns/quote", json=selection, headers=cashier_headers)
        assert quote.json["summary"]["total"] == "0"

        resp = client.post("/api/returns/commit", json=selection, headers=cashier_headers)
        assert resp.status_code == 201
        assert len(resp.json["returns"]) == 1
        assert resp.json["receipt"]["title"] == "Return Receipt"

        lookup = client.post("/api/returns/lookup", json={"phone": PHONE}, headers=cashier_headers)
        assert lookup.json["items"] == []

    def test_unsatisfied_return_shows_refund(self, client, catalog, cashier_headers):
        _rent(client, cashier_headers, "1001")
        items = client.post("/api/returns/lookup", json={"phone": PHONE}, headers=cashier_headers).json["items"]

        resp = client.post(
            "/api/returns/commit",
            json={"phone": PHONE, "rental_item_ids": [items[0]["rental_item_id"]], "unsatisfied": True},
            headers=cashier_headers,
        )
        assert resp.status_code == 201
        assert resp.json["summary"]["total"] == "-40.5"
        assert resp.json["returns"][0]["kind"] == "unsatisfied"

    def test_unsatisfied_flag_must_be_boolean(self, client, catalog, cashier_headers):
        _rent(client, cashier_headers, "1001")
        items = client.post("/api/returns/lookup", json={"phone": PHONE}, headers=cashier_headers).json["items"]
        selection = {"phone": PHONE, "rental_item_ids": [items[0]["rental_item_id"]]}

        for value in ("false", "true", 0, 1):
            resp = client.post(
                "/api/returns/quote",
                json={**selection, "unsatisfied": value},
                headers=cashier_headers,
            )
            assert resp.status_code == 400, value
            assert resp.json["error"] == "unsatisfied must be true or false"

        resp = client.post(
            "/api/returns/commit",
            json={**selection, "unsatisfied": "false"},
            headers=cashier_headers,
        )
        assert resp.status_code == 400
        assert len(client.post("/api/returns/lookup", json={"phone": PHONE}, headers=cashier_headers).json["items"]) == 1

        resp = client.post(
            "/api/returns/quote",
            json={**selection, "unsatisfied": False},
            headers=cashier_headers,
        )
        assert resp.status_code == 200
        assert resp.json["summary"]["unsatisfied"] is False
        assert resp.json["summary"]["total"] == "0"

    def test_return_for_unknown_customer(self, client, catalog, cashier_headers):
        resp = client.post("/api/returns/lookup", json={"phone": "5550000000"}, headers=cashier_headers)
        assert resp.status_code == 404


class TestAdminFlow:

    def test_employee_lifecycle(self, client, admin_headers):
        new = {"username": "jane_doe", "name": "Jane Doe", "password": "Sup3r$ecret", "position": "Cashier"}
        resp = client.post("/api/admin/employees", json=new, headers=admin_headers)
        assert resp.status_code == 201

        resp = client.post("/api/admin/employees", json=new, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json["error"] == "Username already exists"

        resp = client.patch("/api/admin/employees/jane_doe", json={"name": "Jane O'Doe"}, headers=admin_headers)
        assert resp.json["employee"]["name"] == "Jane O'Doe"

        resp = client.delete("/api/admin/employees/jane_doe", headers=admin_headers)
        assert resp.status_code == 200
        resp = client.get("/api/admin/employees/jane_doe", headers=admin_headers)
        assert resp.status_code == 404

        actions = [entry["action"] for entry in client.get("/api/admin/logs", headers=admin_headers).json["logs"]]
        assert actions[:3] == ["employee_deleted", "employee_updated", "employee_created"]

    def test_create_rejects_weak_password(self, client, admin_headers):
        resp = client.post(
            "/api/admin/employees",
            json={"username": "weak_one", "name": "Weak One", "password": "password", "position": "Cashier"},
            headers=admin_headers,
        )
        assert resp.status_code == 400

    def test_create_rejects_reserved_username(self, client, admin_headers):
        resp = client.post(
            "/api/admin/employees",
            json={"username": "root", "name": "Root User", "password": "Sup3r$ecret", "position": "Cashier"},
            headers=admin_headers,
        )
        assert resp.status_code == 400

    def test_cannot_delete_self(self, client, admin_headers):
        resp = client.delete("/api/admin/employees/harry_admin", headers=admin_headers)
        assert resp.status_code == 400

    def test_transactions_and_stats(self, client, catalog, admin_headers):
        cart = _add(client, admin_headers, "sales", None, "2000", 2).json["cart"]
        client.post("/api/sales/checkout", json={"cart": cart, "payment": CARD}, headers=admin_headers)
        _rent(client, admin_headers, "1002")

        resp = client.get("/api/admin/transactions", headers=admin_headers)
        assert resp.status_code == 200
        assert {t["type"] for t in resp.json["transactions"]} == {"sale", "rental"}
        assert resp.json["totals"]["rentals"] == "35"

        sale_id = next(t["id"] for t in resp.json["transactions"] if t["type"] == "sale")
        detail = client.get(f"/api/admin/transactions/sale/{sale_id}", headers=admin_headers)
        assert detail.json["transaction"]["items"][0]["product_id"] == "2000"

        stats = client.get("/api/admin/stats", headers=admin_headers).json
        assert stats["transaction_count"] == 1
        assert stats["active_rentals"] == 1
