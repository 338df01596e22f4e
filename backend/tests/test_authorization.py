"""
Authorization tests for NumberFlow.

Verifies:
- Unauthenticated requests return 401 with a redirect to /login
- Employee role denied admin-only screens (403, redirect to /dashboard)
- Admin role can reach every screen
"""

import pytest


# =============================================================================
# UNAUTHENTICATED ACCESS - 401
# =============================================================================


class TestUnauthenticatedAccess:
    """All protected endpoints return 401 without a token."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/dashboard"),
            ("GET", "/api/numbers"),
            ("POST", "/api/numbers"),
            ("POST", "/api/numbers/assign"),
            ("GET", "/api/purchases"),
            ("GET", "/api/sales"),
            ("POST", "/api/sales/port-out"),
            ("GET", "/api/port-outs"),
            ("GET", "/api/dealer-purchases"),
            ("GET", "/api/reminders"),
            ("GET", "/api/activities"),
            ("GET", "/api/users"),
            ("GET", "/api/exports/numbers"),
            ("POST", "/api/imports/numbers"),
            ("GET", "/api/auth/me"),
        ],
    )
    def test_requires_auth(self, client, db_session, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"
        assert resp.json["redirect"] == "/login"

    def test_garbage_token(self, client, db_session):
        resp = client.get("/api/numbers", headers={"Authorization": "Bearer not-a-token"})
        assert resp.status_code == 401


# =============================================================================
# EMPLOYEE DENIED ADMIN-ONLY SCREENS - 403
# =============================================================================


class TestEmployeeDenied:

    def test_cannot_list_users(self, client, employee_headers):
        resp = client.get("/api/users", headers=employee_headers)
        assert resp.status_code == 403
        assert resp.json["redirect"] == "/dashboard"

    def test_cannot_create_user(self, client, employee_headers):
        resp = client.post(
            "/api/users",
            json={"email": "x@numberflow.test", "password": "secret123", "display_name": "Xavier"},
            headers=employee_headers,
        )
        assert resp.status_code == 403

    def test_cannot_view_activity_log(self, client, employee_headers):
        resp = client.get("/api/activities", headers=employee_headers)
        assert resp.status_code == 403

    def test_cannot_assign_numbers(self, client, employee_headers):
        resp = client.post(
            "/api/numbers/assign",
            json={"number_ids": [1], "employee_name": "Ramesh"},
            headers=employee_headers,
        )
        assert resp.status_code == 403
        assert resp.json["required_capability"] == "ASSIGN_NUMBERS"

    def test_cannot_update_port_out_payment(self, client, employee_headers):
        resp = client.post(
            "/api/port-outs/payment",
            json={"port_out_ids": [1], "payment_status": "Done"},
            headers=employee_headers,
        )
        assert resp.status_code == 403


# =============================================================================
# EMPLOYEE ALLOWED
# =============================================================================


class TestEmployeeAllowed:

    @pytest.mark.parametrize(
        "path",
        [
            "/api/dashboard",
            "/api/numbers",
            "/api/purchases",
            "/api/sales",
            "/api/port-outs",
            "/api/dealer-purchases",
            "/api/reminders",
            "/api/users/employees",
        ],
    )
    def test_can_view(self, client, employee_headers, path):
        resp = client.get(path, headers=employee_headers)
        assert resp.status_code == 200, f"GET {path} returned {resp.status_code}"


# =============================================================================
# ADMIN ALLOWED
# =============================================================================


class TestAdminAllowed:

    def test_can_list_users(self, client, admin_headers, employee_user):
        resp = client.get("/api/users", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["count"] == 2

    def test_can_create_employee(self, client, admin_headers):
        resp = client.post(
            "/api/users",
            json={"email": "new@numberflow.test", "password": "secret123", "display_name": "Newbie"},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        assert resp.json["user"]["role"] == "employee"

    def test_duplicate_email(self, client, admin_headers):
        resp = client.post(
            "/api/users",
            json={"email": "ADMIN@numberflow.test", "password": "secret123", "display_name": "Again"},
            headers=admin_headers,
        )
        assert resp.status_code == 409

    def test_can_view_activity_log(self, client, admin_headers):
        resp = client.get("/api/activities", headers=admin_headers)
        assert resp.status_code == 200


# =============================================================================
# PUBLIC ENDPOINTS
# =============================================================================


class TestPublicEndpoints:

    def test_health(self, client, db_session):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json["checks"]["database"]["status"] == "healthy"
        assert resp.json["checks"]["rts_sweeper"]["status"] == "disabled"
