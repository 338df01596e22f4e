# Overview: Read-only dashboard aggregates scoped to the caller.

from __future__ import annotations

from ..models import User
from ..models.communications import REMINDER_PENDING
from ..models.numbers import STATUS_NON_RTS, STATUS_RTS
from . import activity_service, number_service, reminder_service, sale_service


LATEST_ACTIVITY_LIMIT = 5


def summary(user: User) -> dict:
    numbers = number_service.list_numbers(user)
    reminders = reminder_service.list_reminders(user)
    return {
        "cards": {
            "total_numbers": len(numbers),
            "rts_numbers": sum(1 for n in numbers if n.status == STATUS_RTS),
            "non_rts_numbers": sum(1 for n in numbers if n.status == STATUS_NON_RTS),
            "pending_uploads": sum(1 for n in numbers if n.upload_status == "Pending"),
            "sales": len(sale_service.list_sales(user)),
            "port_outs": len(sale_service.list_port_outs()),
        },
        "status_chart": {
            "rts": sum(1 for n in numbers if n.status == STATUS_RTS),
            "non_rts": sum(1 for n in numbers if n.status != STATUS_RTS),
            "pending_reminders": sum(1 for r in reminders if r.status == REMINDER_PENDING),
        },
        "latest_activities": [a.to_dict() for a in activity_service.list_activities(user, limit=LATEST_ACTIVITY_LIMIT)],
        "unseen_activities": activity_service.unseen_count(user),
    }
