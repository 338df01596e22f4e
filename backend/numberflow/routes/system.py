# backend/numberflow/routes/system.py
"""
System health endpoint.

Reports database reachability and whether the RTS sweeper thread is alive.
"""

import time

from flask import Blueprint, current_app

from ..extensions import db
from ..models import NumberRecord, SessionToken, User
from numberflow.time_utils import utcnow

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    start_time = time.time()
    try:
        numbers = db.session.query(NumberRecord).count()
        users = db.session.query(User).count()
        active_sessions = db.session.query(SessionToken).filter_by(is_revoked=False).count()

        return {
            "status": "healthy",
            "latency_ms": round((time.time() - start_time) * 1000, 2),
            "details": {
                "numbers": numbers,
                "users": users,
                "active_sessions": active_sessions,
            },
        }
    except Exception:
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round((time.time() - start_time) * 1000, 2),
            "error": "Database error",
        }


def check_sweeper_health() -> dict:
    sweeper = current_app.extensions.get("rts_sweeper")
    if sweeper is None:
        return {"status": "disabled"}
    if sweeper.running:
        return {"status": "healthy", "interval_seconds": sweeper.interval}
    return {"status": "degraded", "warning": "RTS sweeper thread is not running"}


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: database reachable (sweeper may be degraded)
    - 503: database unreachable
    """
    database_health = check_database_health()
    sweeper_health = check_sweeper_health()

    if database_health["status"] == "unhealthy":
        overall_status, http_status = "unhealthy", 503
    elif sweeper_health["status"] == "degraded":
        overall_status, http_status = "degraded", 200
    else:
        overall_status, http_status = "healthy", 200

    return {
        "status": overall_status,
        "timestamp": utcnow().isoformat() + "Z",
        "checks": {
            "database": database_health,
            "rts_sweeper": sweeper_health,
        },
    }, http_status
