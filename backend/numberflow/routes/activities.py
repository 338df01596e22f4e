# Overview: Flask API routes for the activity log and dashboard; parses input and returns JSON responses.

from flask import Blueprint, g, jsonify

from ..decorators import require_auth, require_capability
from ..permissions import VIEW_ACTIVITIES, VIEW_DASHBOARD
from ..services import activity_service, dashboard_service
from .helpers import listing_query, listing_response


activities_bp = Blueprint("activities", __name__, url_prefix="/api")


@activities_bp.get("/activities")
@require_auth
@require_capability(VIEW_ACTIVITIES)
def list_activities_route():
    """Activity log, newest first unless sorted otherwise."""
    query = listing_query(
        {
            "employee_name": ("employee_name", "exact"),
            "action": ("action", "exact"),
            "search": ("description", "contains"),
        },
        {"sr_no", "employee_name", "action", "timestamp"},
    )
    return listing_response(activity_service.list_activities(g.current_user), query)


@activities_bp.post("/activities/seen")
@require_auth
@require_capability(VIEW_DASHBOARD)
def mark_seen_route():
    seen = activity_service.mark_seen(g.current_user)
    return jsonify({"seen_activities_count": seen, "unseen": 0})


@activities_bp.get("/dashboard")
@require_auth
@require_capability(VIEW_DASHBOARD)
def dashboard_route():
    """Summary cards, status chart and the latest activities visible to the caller."""
    return jsonify(dashboard_service.summary(g.current_user))
