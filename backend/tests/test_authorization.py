"""
Authorization tests.

Verifies:
- Unauthenticated requests return 401
- Cashier position denied admin operations (403)
- Admin position can perform every operation
- Logout revokes the token; credential changes sign the employee out
"""

import pytest

from conftest import PASSWORD, auth_headers, get_auth_token


# =============================================================================
# UNAUTHENTICATED ACCESS - 401
# =============================================================================


class TestUnauthenticatedAccess:
    """All protected endpoints return 401 without a token."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/admin/employees"),
            ("POST", "/api/admin/employees"),
            ("PATCH", "/api/admin/employees/debra_cashier"),
            ("DELETE", "/api/admin/employees/debra_cashier"),
            ("GET", "/api/admin/transactions"),
            ("GET", "/api/admin/stats"),
            ("GET", "/api/admin/logs"),
            ("GET", "/api/products"),
            ("GET", "/api/rental-products"),
            ("POST", "/api/sales/checkout"),
            ("POST", "/api/rentals/checkout"),
            ("POST", "/api/returns/commit"),
            ("POST", "/api/auth/logout"),
            ("POST", "/api/auth/validate"),
        ],
    )
    def test_requires_auth(self, client, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"

    def test_garbage_token(self, client):
        resp = client.get("/api/products", headers=auth_headers("not-a-token"))
        assert resp.status_code == 401

    def test_health_is_public(self, client, catalog, admin):
        resp = client.get("/api/system/health")
        assert resp.status_code == 200
        assert resp.json["status"] == "healthy"


# =============================================================================
# CASHIER DENIED ADMIN OPERATIONS - 403
# =============================================================================


class TestCashierDeniedAdmin:
    """Cashier position cannot reach admin routes."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/admin/employees"),
            ("POST", "/api/admin/employees"),
            ("DELETE", "/api/admin/employees/harry_admin"),
            ("GET", "/api/admin/transactions"),
            ("GET", "/api/admin/stats"),
            ("GET", "/api/admin/logs"),
        ],
    )
    def test_forbidden(self, client, cashier_headers, method, path):
        resp = getattr(client, method.lower())(path, headers=cashier_headers)
        assert resp.status_code == 403
        assert resp.json["error"] == "Admin access required"
        assert resp.json["details"]["required_position"] == "Admin"

    def test_cashier_can_sell(self, client, catalog, cashier_headers):
        resp = client.get("/api/products", headers=cashier_headers)
        assert resp.status_code == 200
        assert len(resp.json["products"]) == 18


class TestAdminAllowed:

    def test_admin_lists_employees(self, client, admin_headers, cashier):
        resp = client.get("/api/admin/employees", headers=admin_headers)
        assert resp.status_code == 200
        usernames = {e["username"] for e in resp.json["employees"]}
        assert usernames == {"harry_admin", "debra_cashier"}
        assert all("password_hash" not in e for e in resp.json["employees"])

    def test_admin_can_use_cashier_routes(self, client, catalog, admin_headers):
        resp = client.get("/api/rental-products?category=equipment", headers=admin_headers)
        assert resp.status_code == 200
        assert [p["id"] for p in resp.json["rental_products"]] == ["1008", "1009", "1010"]


# =============================================================================
# LOGIN / LOGOUT
# =============================================================================


class TestSessions:

    def test_wrong_password(self, client, cashier):
        resp = client.post("/api/auth/login", json={"username": "debra_cashier", "password": "Wrong123!"})
        assert resp.status_code == 401
        assert resp.json["error"] == "Invalid credentials"

    def test_unknown_username_same_message(self, client, cashier):
        resp = client.post("/api/auth/login", json={"username": "nobody_here", "password": PASSWORD})
        assert resp.status_code == 401
        assert resp.json["error"] == "Invalid credentials"

    def test_missing_fields(self, client):
        resp = client.post("/api/auth/login", json={"username": "debra_cashier"})
        assert resp.status_code == 400

    def test_validate_returns_employee(self, client, cashier_headers):
        resp = client.post("/api/auth/validate", headers=cashier_headers)
        assert resp.status_code == 200
        assert resp.json["employee"]["position"] == "Cashier"

    def test_logout_revokes_token(self, client, cashier_headers):
        assert client.post("/api/auth/logout", headers=cashier_headers).status_code == 200
        assert client.post("/api/auth/validate", headers=cashier_headers).status_code == 401

    def test_password_change_signs_employee_out(self, client, admin_headers, cashier):
        token = get_auth_token(client, "debra_cashier", PASSWORD)
        resp = client.patch(
            "/api/admin/employees/debra_cashier",
            json={"password": "NewPassw0rd!"},
            headers=admin_headers,
        )
        assert resp.status_code == 200

        assert client.post("/api/auth/validate", headers=auth_headers(token)).status_code == 401
        assert get_auth_token(client, "debra_cashier", "NewPassw0rd!") is not None

    def test_promoted_cashier_must_log_in_again(self, client, admin_headers, cashier_headers):
        resp = client.patch(
            "/api/admin/employees/debra_cashier",
            json={"position": "Admin"},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        assert client.get("/api/admin/stats", headers=cashier_headers).status_code == 401

        headers = auth_headers(get_auth_token(client, "debra_cashier", PASSWORD))
        assert client.get("/api/admin/stats", headers=headers).status_code == 200
