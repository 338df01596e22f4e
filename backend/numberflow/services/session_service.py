# Overview: Service-layer operations for session tokens; encapsulates idle timeout and revocation.

"""
Session Token Management Service

Tokens are opaque random strings handed to the client once; the database
stores only their SHA-256 hash.

SESSION GATE:
- loading: the client has not asked yet (never stored server-side)
- unauthenticated: no token, unknown token, revoked or expired token
- authenticated: valid token; every authenticated request and every
  reported input event resets the idle countdown

IDLE TIMEOUT:
- SESSION_IDLE_TIMEOUT_MINUTES without input revokes the session
- revocation happens once; later requests with the same token keep getting
  the "Session expired" answer instead of a generic 401
- SESSION_ABSOLUTE_TIMEOUT_HOURS caps the total session length
"""

import secrets
import hashlib
from dataclasses import dataclass
from datetime import datetime, timedelta

from flask import current_app

from ..extensions import db
from ..models import SessionToken, User
from numberflow.time_utils import utcnow


STATE_UNAUTHENTICATED = "unauthenticated"
STATE_AUTHENTICATED = "authenticated"

# Client input events that count as user activity
INPUT_EVENTS = ("mousemove", "keydown", "click", "touchstart")

IDLE_TIMEOUT_REASON = "Idle timeout"
LOGOUT_REASON = "User logout"


class SessionExpiredError(Exception):
    """Raised when a token was signed out for inactivity."""

    def __init__(self, just_revoked: bool):
        self.just_revoked = just_revoked
        super().__init__("Session expired")


@dataclass
class SessionContext:
    """Identity resolved for one authenticated request."""
    user: User
    session: SessionToken

    @property
    def role(self) -> str:
        return self.user.role


def idle_timeout() -> timedelta:
    return timedelta(minutes=current_app.config["SESSION_IDLE_TIMEOUT_MINUTES"])


def absolute_timeout() -> timedelta:
    return timedelta(hours=current_app.config["SESSION_ABSOLUTE_TIMEOUT_HOURS"])


def generate_token() -> str:
    """64-character hex string (32 bytes of entropy). Never stored."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def create_session(
    user_id: int,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[SessionToken, str]:
    """
    Create a new session token for a user.

    Returns (session_record, plaintext_token). The client receives the
    plaintext token; the database stores only its hash.
    """
    user = db.session.get(User, user_id)
    if not user:
        raise ValueError("User not found")
    if not user.is_active:
        raise ValueError("User account is deactivated")

    plaintext_token = generate_token()
    now = utcnow()

    session = SessionToken(
        user_id=user_id,
        token_hash=hash_token(plaintext_token),
        created_at=now,
        last_activity_at=now,
        expires_at=now + absolute_timeout(),
        user_agent=user_agent,
        ip_address=ip_address,
        is_revoked=False,
    )
    db.session.add(session)
    user.last_login_at = now
    db.session.commit()

    return session, plaintext_token


def find_session(token: str) -> SessionToken | None:
    return db.session.query(SessionToken).filter_by(token_hash=hash_token(token)).first()


def _revoke(session: SessionToken, reason: str, now: datetime) -> None:
    session.is_revoked = True
    session.revoked_at = now
    session.revoked_reason = reason


def validate_session(token: str, now: datetime | None = None) -> SessionContext | None:
    """
    Validate a token and return its SessionContext.

    Returns None for unknown, revoked, expired or deactivated sessions.
    Raises SessionExpiredError when the session ran past its idle timeout;
    only the first such call revokes it (just_revoked=True).

    A valid call counts as activity and resets the idle countdown.
    """
    now = now or utcnow()
    session = find_session(token)
    if session is None:
        return None

    if session.is_revoked:
        if session.revoked_reason == IDLE_TIMEOUT_REASON:
            raise SessionExpiredError(just_revoked=False)
        return None

    if session.expires_at < now:
        return None

    if now - session.last_activity_at > idle_timeout():
        _revoke(session, IDLE_TIMEOUT_REASON, now)
        db.session.commit()
        current_app.logger.info("Session %s for user %s revoked after inactivity", session.id, session.user_id)
        raise SessionExpiredError(just_revoked=True)

    user = session.user
    if not user or not user.is_active:
        _revoke(session, "User account deactivated", now)
        db.session.commit()
        return None

    session.last_activity_at = now
    db.session.commit()

    return SessionContext(user=user, session=session)


def session_state(token: str | None) -> str:
    """Gate state for a token without touching its idle countdown."""
    if not token:
        return STATE_UNAUTHENTICATED
    session = find_session(token)
    if session is None or session.is_revoked:
        return STATE_UNAUTHENTICATED
    now = utcnow()
    if session.expires_at < now or now - session.last_activity_at > idle_timeout():
        return STATE_UNAUTHENTICATED
    return STATE_AUTHENTICATED


def record_activity(session: SessionToken, event: str, now: datetime | None = None) -> datetime:
    """Reset the idle countdown for a reported input event."""
    if event not in INPUT_EVENTS:
        raise ValueError(f"event must be one of: {', '.join(INPUT_EVENTS)}")
    session.last_activity_at = now or utcnow()
    db.session.commit()
    return session.last_activity_at


def seconds_until_idle(session: SessionToken, now: datetime | None = None) -> int:
    now = now or utcnow()
    remaining = session.last_activity_at + idle_timeout() - now
    return max(0, int(remaining.total_seconds()))


def revoke_session(token: str, reason: str = LOGOUT_REASON) -> bool:
    """
    Revoke a session token.

    Returns True if the session was revoked, False if not found or already
    revoked.
    """
    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()

    if not session:
        return False

    _revoke(session, reason, utcnow())
    db.session.commit()
    return True


def cleanup_expired_sessions(retention_days: int = 30) -> int:
    """Delete expired or revoked sessions older than the retention window."""
    cutoff = utcnow() - timedelta(days=retention_days)

    deleted = db.session.query(SessionToken).filter(
        db.or_(
            SessionToken.expires_at < utcnow(),
            SessionToken.is_revoked == True,  # noqa: E712
        ),
        SessionToken.created_at < cutoff,
    ).delete(synchronize_session=False)

    db.session.commit()
    return deleted
