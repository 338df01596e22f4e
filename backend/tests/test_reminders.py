"""
Work reminder tests.
"""

from numberflow.models import Activity


def add_reminder(client, headers, **overrides):
    body = {"task_name": "Upload KYC", "assigned_to": "Ramesh", "due_date": "2024-06-10"}
    body.update(overrides)
    resp = client.post("/api/reminders", json=body, headers=headers)
    assert resp.status_code == 201, resp.json
    return resp.json["reminder"]


class TestReminders:

    def test_add_reminder(self, client, admin_headers, employee_user, db_session):
        reminder = add_reminder(client, admin_headers)
        assert reminder["status"] == "Upload Pending"
        assert reminder["sr_no"] == 1

        activity = db_session.query(Activity).one()
        assert activity.action == "Added Reminder"
        assert "Ramesh" in activity.description

    def test_employee_sees_only_own(self, client, admin_headers, employee_headers):
        add_reminder(client, admin_headers)
        add_reminder(client, admin_headers, task_name="Collect SIMs", assigned_to="Admin User")

        resp = client.get("/api/reminders", headers=employee_headers)
        assert [r["task_name"] for r in resp.json["items"]] == ["Upload KYC"]

        resp = client.get("/api/reminders", headers=admin_headers)
        assert resp.json["count"] == 2

    def test_pending_listed_first(self, client, admin_headers):
        early = add_reminder(client, admin_headers, task_name="Early", due_date="2024-06-01")
        add_reminder(client, admin_headers, task_name="Late", due_date="2024-06-20")
        client.post(f"/api/reminders/{early['id']}/done", headers=admin_headers)

        resp = client.get("/api/reminders", headers=admin_headers)
        assert [r["task_name"] for r in resp.json["items"]] == ["Late", "Early"]

    def test_mark_done_replaces_notes(self, client, admin_headers, employee_headers):
        reminder = add_reminder(client, admin_headers, notes="bring forms")

        resp = client.post(
            f"/api/reminders/{reminder['id']}/done",
            json={"note": "uploaded"},
            headers=employee_headers,
        )
        assert resp.status_code == 200
        assert resp.json["reminder"]["status"] == "ACT Done"
        assert resp.json["reminder"]["notes"] == "uploaded"

    def test_mark_done_without_note_keeps_notes(self, client, admin_headers):
        reminder = add_reminder(client, admin_headers, notes="bring forms")
        resp = client.post(f"/api/reminders/{reminder['id']}/done", headers=admin_headers)
        assert resp.json["reminder"]["notes"] == "bring forms"

    def test_employee_cannot_complete_others(self, client, admin_headers, employee_headers):
        reminder = add_reminder(client, admin_headers, assigned_to="Admin User")
        resp = client.post(f"/api/reminders/{reminder['id']}/done", headers=employee_headers)
        assert resp.status_code == 404

    def test_missing_fields(self, client, admin_headers):
        resp = client.post("/api/reminders", json={"task_name": "x"}, headers=admin_headers)
        assert resp.status_code == 400
        assert {"assigned_to", "due_date"} <= set(resp.json["fields"])
