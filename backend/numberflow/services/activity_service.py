# Overview: Service-layer operations for the activity log; append-only writes and scoped reads.

"""
Activity Log

Every store mutation appends exactly one Activity in the same transaction
as the change it describes. The log is never edited.

Reads are newest first. Admins see every entry; employees see the entries
they performed (matched by display name).
"""

from __future__ import annotations

from datetime import datetime

from ..extensions import db
from ..models import Activity, User
from numberflow.time_utils import utcnow
from .records import next_sr_no


SYSTEM_ACTOR = "System"


def log_activity(
    employee_name: str,
    action: str,
    description: str,
    *,
    user_id: int | None = None,
    timestamp: datetime | None = None,
) -> Activity:
    """
    Stage one Activity row. The caller commits it together with the
    mutation it describes.
    """
    activity = Activity(
        sr_no=next_sr_no(Activity),
        employee_name=employee_name,
        action=action,
        description=description,
        timestamp=timestamp or utcnow(),
        created_by_user_id=user_id,
    )
    db.session.add(activity)
    # sr_no of the next staged row depends on this one
    db.session.flush()
    return activity


def log_user_activity(user: User, action: str, description: str) -> Activity:
    return log_activity(user.display_name or "User", action, description, user_id=user.id)


def _scoped_query(user: User):
    query = db.session.query(Activity)
    if not user.is_admin:
        query = query.filter(Activity.employee_name == user.display_name)
    return query


def list_activities(user: User, limit: int | None = None) -> list[Activity]:
    query = _scoped_query(user).order_by(Activity.timestamp.desc(), Activity.id.desc())
    if limit:
        query = query.limit(limit)
    return query.all()


def count_activities(user: User) -> int:
    return _scoped_query(user).count()


def unseen_count(user: User) -> int:
    return max(0, count_activities(user) - (user.seen_activities_count or 0))


def mark_seen(user: User) -> int:
    """Record that the user has looked at every activity visible to them."""
    user.seen_activities_count = count_activities(user)
    db.session.commit()
    return user.seen_activities_count
