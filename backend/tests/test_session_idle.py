"""
Session gate tests.

Verifies:
- login / logout and the first-user signup
- the gate state reported to clients
- idle timeout signs the session out exactly once
- reported input events reset the idle countdown
"""

from datetime import timedelta

import pytest

from numberflow.models import SessionToken
from numberflow.services import session_service
from numberflow.services.session_service import SessionExpiredError
from numberflow.time_utils import utcnow

ADMIN_EMAIL = "admin@numberflow.test"
PASSWORD = "secret123"


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


def idle_out(db_session, token, minutes=16):
    session = session_service.find_session(token)
    session.last_activity_at = utcnow() - timedelta(minutes=minutes)
    db_session.commit()
    return session


class TestLogin:

    def test_login_returns_token(self, client, admin_user):
        resp = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": PASSWORD})
        assert resp.status_code == 200
        assert resp.json["token"]
        assert resp.json["user"]["role"] == "admin"
        assert resp.json["idle_timeout_seconds"] == 15 * 60

        me = client.get("/api/auth/me", headers=auth_headers(resp.json["token"]))
        assert me.status_code == 200
        assert me.json["user"]["email"] == ADMIN_EMAIL

    def test_email_is_case_insensitive(self, client, admin_user):
        resp = client.post("/api/auth/login", json={"email": ADMIN_EMAIL.upper(), "password": PASSWORD})
        assert resp.status_code == 200

    def test_wrong_password(self, client, admin_user):
        resp = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": "nope123"})
        assert resp.status_code == 401

    def test_logout_revokes_token(self, client, admin_headers):
        resp = client.post("/api/auth/logout", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["redirect"] == "/login"
        assert client.get("/api/auth/me", headers=admin_headers).status_code == 401


class TestSignup:

    def test_first_user_becomes_admin(self, client, db_session):
        resp = client.post(
            "/api/auth/signup",
            json={"email": "owner@numberflow.test", "password": PASSWORD, "display_name": "Owner"},
        )
        assert resp.status_code == 201
        assert resp.json["user"]["role"] == "admin"
        assert resp.json["token"]

    def test_short_password(self, client, db_session):
        resp = client.post(
            "/api/auth/signup",
            json={"email": "owner@numberflow.test", "password": "123", "display_name": "Owner"},
        )
        assert resp.status_code == 400

    def test_closed_once_users_exist(self, client, admin_user):
        resp = client.post(
            "/api/auth/signup",
            json={"email": "late@numberflow.test", "password": PASSWORD, "display_name": "Late"},
        )
        assert resp.status_code == 403


class TestGateState:

    def test_no_token_is_unauthenticated(self, client, db_session):
        resp = client.get("/api/auth/session")
        assert resp.json["state"] == "unauthenticated"
        assert resp.json["signup_open"] is True

    def test_valid_token_is_authenticated(self, client, admin_headers):
        resp = client.get("/api/auth/session", headers=admin_headers)
        assert resp.json["state"] == "authenticated"
        assert resp.json["signup_open"] is False
        assert 0 < resp.json["seconds_until_idle"] <= 15 * 60

    def test_idle_token_is_unauthenticated(self, client, admin_token, db_session):
        idle_out(db_session, admin_token)
        resp = client.get("/api/auth/session", headers=auth_headers(admin_token))
        assert resp.json["state"] == "unauthenticated"


class TestIdleTimeout:

    def test_idle_session_is_signed_out(self, client, admin_token, db_session):
        idle_out(db_session, admin_token)

        resp = client.get("/api/dashboard", headers=auth_headers(admin_token))
        assert resp.status_code == 401
        assert resp.json["error"] == "Session expired"
        assert resp.json["message"] == "You have been logged out due to inactivity."
        assert resp.json["redirect"] == "/login"

        session = db_session.query(SessionToken).one()
        assert session.is_revoked is True
        assert session.revoked_reason == "Idle timeout"

    def test_revocation_happens_once(self, client, admin_token, db_session):
        idle_out(db_session, admin_token)
        client.get("/api/dashboard", headers=auth_headers(admin_token))
        revoked_at = db_session.query(SessionToken).one().revoked_at

        resp = client.get("/api/dashboard", headers=auth_headers(admin_token))
        assert resp.status_code == 401
        assert resp.json["error"] == "Session expired"
        db_session.expire_all()
        assert db_session.query(SessionToken).one().revoked_at == revoked_at

    def test_service_reports_first_revocation(self, admin_token, db_session):
        session = session_service.find_session(admin_token)
        later = session.last_activity_at + timedelta(minutes=15, seconds=1)

        with pytest.raises(SessionExpiredError) as first:
            session_service.validate_session(admin_token, now=later)
        assert first.value.just_revoked is True

        with pytest.raises(SessionExpiredError) as second:
            session_service.validate_session(admin_token, now=later)
        assert second.value.just_revoked is False

    def test_just_under_timeout_is_still_valid(self, admin_token, db_session):
        session = session_service.find_session(admin_token)
        later = session.last_activity_at + timedelta(minutes=14, seconds=59)
        context = session_service.validate_session(admin_token, now=later)
        assert context is not None
        assert context.session.last_activity_at == later


class TestActivityHeartbeat:

    @pytest.mark.parametrize("event", ["mousemove", "keydown", "click", "touchstart"])
    def test_input_events_reset_countdown(self, client, admin_token, db_session, event):
        idle_out(db_session, admin_token, minutes=10)
        resp = client.post("/api/auth/activity", json={"event": event}, headers=auth_headers(admin_token))
        assert resp.status_code == 200
        assert resp.json["seconds_until_idle"] > 14 * 60

    def test_unknown_event(self, client, admin_headers):
        resp = client.post("/api/auth/activity", json={"event": "scroll"}, headers=admin_headers)
        assert resp.status_code == 400
        assert "event" in resp.json["fields"]


class TestProfile:

    def test_rename_keeps_own_records(self, client, admin_headers, employee_headers, employee_user, make_number):
        make_number("9876543210", user=employee_user)
        sold = make_number("9123456780", user=employee_user)
        client.post(
            f"/api/numbers/{sold.id}/sell",
            json={"sale_price": 200, "sold_to": "Buyer", "sale_date": "2024-06-01"},
            headers=employee_headers,
        )
        client.post(
            "/api/reminders",
            json={"task_name": "Upload KYC", "assigned_to": "Ramesh", "due_date": "2024-06-10"},
            headers=admin_headers,
        )

        resp = client.patch("/api/auth/profile", json={"display_name": "Ramesh K"}, headers=employee_headers)
        assert resp.status_code == 200
        assert resp.json["user"]["display_name"] == "Ramesh K"

        numbers = client.get("/api/numbers", headers=employee_headers).json["items"]
        assert [n["mobile"] for n in numbers] == ["9876543210"]
        assert numbers[0]["assigned_to"] == "Ramesh K"

        sales = client.get("/api/sales", headers=employee_headers).json["items"]
        assert [s["mobile"] for s in sales] == ["9123456780"]
        assert sales[0]["original_number_data"]["assigned_to"] == "Ramesh K"

        assert client.get("/api/reminders", headers=employee_headers).json["count"] == 1
        dashboard = client.get("/api/dashboard", headers=employee_headers).json
        assert dashboard["latest_activities"]
        assert {a["employee_name"] for a in dashboard["latest_activities"]} == {"Ramesh K"}

    def test_short_name(self, client, employee_headers):
        resp = client.patch("/api/auth/profile", json={"display_name": "R"}, headers=employee_headers)
        assert resp.status_code == 400
        assert "display_name" in resp.json["fields"]
