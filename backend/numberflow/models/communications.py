from __future__ import annotations

from ..extensions import db
from numberflow.time_utils import to_utc_z


REMINDER_PENDING = "Upload Pending"
REMINDER_DONE = "ACT Done"
REMINDER_STATUSES = (REMINDER_PENDING, REMINDER_DONE)


class Reminder(db.Model):
    """
    Work reminder assigned to an employee by display name.

    Pending reminders are listed first, then by due date.
    """
    __tablename__ = "reminders"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    sr_no = db.Column(db.Integer, nullable=False, index=True)

    task_name = db.Column(db.String(255), nullable=False)
    assigned_to = db.Column(db.String(128), nullable=False, index=True)
    status = db.Column(db.String(32), nullable=False, default=REMINDER_PENDING)
    due_date = db.Column(db.DateTime(timezone=True), nullable=False)
    notes = db.Column(db.Text, nullable=True)

    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self):
        return {
            "id": self.id,
            "sr_no": self.sr_no,
            "task_name": self.task_name,
            "assigned_to": self.assigned_to,
            "status": self.status,
            "due_date": to_utc_z(self.due_date),
            "notes": self.notes,
            "created_by_user_id": self.created_by_user_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Activity(db.Model):
    """
    Employee activity log.

    IMMUTABLE: Append-only. Every mutation in the store writes exactly one
    row here; the background sweep writes as "System".
    """
    __tablename__ = "activities"
    __table_args__ = (
        db.Index("ix_activities_timestamp", "timestamp"),
        db.Index("ix_activities_employee", "employee_name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sr_no = db.Column(db.Integer, nullable=False)

    employee_name = db.Column(db.String(128), nullable=False)
    action = db.Column(db.String(128), nullable=False)
    description = db.Column(db.Text, nullable=False)

    timestamp = db.Column(db.DateTime(timezone=True), nullable=False)
    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    def to_dict(self):
        return {
            "id": self.id,
            "sr_no": self.sr_no,
            "employee_name": self.employee_name,
            "action": self.action,
            "description": self.description,
            "timestamp": to_utc_z(self.timestamp),
            "created_by_user_id": self.created_by_user_id,
        }
