# Overview: Flask API routes for work reminders; parses input and returns JSON responses.

from flask import Blueprint, g, request

from ..decorators import require_auth, require_capability
from ..permissions import COMPLETE_REMINDERS, MANAGE_REMINDERS, VIEW_REMINDERS
from ..services import reminder_service
from ..validation import PayloadReader
from .helpers import json_body, listing_query, listing_response, mutation_response


reminders_bp = Blueprint("reminders", __name__, url_prefix="/api/reminders")


@reminders_bp.get("")
@require_auth
@require_capability(VIEW_REMINDERS)
def list_reminders_route():
    """Pending reminders first, then by due date, unless sorted otherwise."""
    query = listing_query(
        {
            "status": ("status", "exact"),
            "assigned_to": ("assigned_to", "exact"),
            "search": ("task_name", "contains"),
        },
        {"sr_no", "task_name", "assigned_to", "status", "due_date"},
    )
    return listing_response(reminder_service.list_reminders(g.current_user), query)


@reminders_bp.post("")
@require_auth
@require_capability(MANAGE_REMINDERS)
def add_reminder_route():
    """Body: {"task_name": "...", "assigned_to": "Ramesh", "due_date": "2024-05-01", "notes": "..."}"""
    reader = PayloadReader(json_body())
    task_name = reader.text("task_name")
    assigned_to = reader.text("assigned_to", max_length=128)
    due_date = reader.date("due_date")
    notes = reader.text("notes", required=False, max_length=5000)
    reader.raise_if_errors()

    reminder, notification = reminder_service.add_reminder(
        g.current_user, task_name=task_name, assigned_to=assigned_to, due_date=due_date, notes=notes,
    )
    return mutation_response(notification, 201, reminder=reminder.to_dict())


@reminders_bp.post("/<int:reminder_id>/done")
@require_auth
@require_capability(COMPLETE_REMINDERS)
def mark_done_route(reminder_id: int):
    """Body (optional): {"note": "..."}"""
    reader = PayloadReader(request.get_json(silent=True) or {})
    note = reader.text("note", required=False, max_length=5000)
    reader.raise_if_errors()

    reminder, notification = reminder_service.mark_reminder_done(g.current_user, reminder_id, note=note)
    return mutation_response(notification, reminder=reminder.to_dict())
