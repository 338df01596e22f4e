# Overview: Service-layer operations for work reminders.

"""
Work Reminders

Reminders are assigned to an employee by display name. Employees see and
complete their own reminders; admins see all of them.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import case

from ..extensions import db
from ..models import Reminder, User
from ..models.communications import REMINDER_DONE, REMINDER_PENDING
from .activity_service import log_user_activity
from .records import Notification, RecordNotFoundError, next_sr_no


REMINDER_KIND = "Reminder"


def scoped_query(user: User):
    query = db.session.query(Reminder)
    if not user.is_admin:
        query = query.filter(Reminder.assigned_to == user.display_name)
    return query


def list_reminders(user: User) -> list[Reminder]:
    """Pending first, then by due date."""
    pending_first = case((Reminder.status == REMINDER_PENDING, 0), else_=1)
    return scoped_query(user).order_by(pending_first, Reminder.due_date, Reminder.id).all()


def get_reminder(user: User, reminder_id: int) -> Reminder:
    reminder = scoped_query(user).filter(Reminder.id == reminder_id).first()
    if reminder is None:
        raise RecordNotFoundError(REMINDER_KIND, reminder_id)
    return reminder


def add_reminder(
    user: User,
    *,
    task_name: str,
    assigned_to: str,
    due_date: datetime,
    notes: str | None = None,
) -> tuple[Reminder, Notification]:
    reminder = Reminder(
        sr_no=next_sr_no(Reminder),
        task_name=task_name,
        assigned_to=assigned_to,
        status=REMINDER_PENDING,
        due_date=due_date,
        notes=notes,
        created_by_user_id=user.id,
    )
    db.session.add(reminder)

    description = f'Assigned task "{task_name}" to {assigned_to}'
    log_user_activity(user, "Added Reminder", description)
    db.session.commit()

    return reminder, Notification("Reminder Added", description)


def mark_reminder_done(user: User, reminder_id: int, note: str | None = None) -> tuple[Reminder, Notification]:
    """Complete a reminder; a note, when given, replaces the reminder notes."""
    reminder = get_reminder(user, reminder_id)
    reminder.status = REMINDER_DONE
    if note:
        reminder.notes = note

    description = f"Completed task: {reminder.task_name}"
    log_user_activity(user, "Marked Task Done", description)
    db.session.commit()

    return reminder, Notification("Task Completed", description)
