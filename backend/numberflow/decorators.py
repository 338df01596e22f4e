# Overview: Request and capability decorators for API routes.

from functools import wraps

from flask import current_app, g, jsonify, request

from .permissions import DEFAULT_SCREEN, LOGIN_SCREEN, has_capability
from .services import session_service
from .services.session_service import SessionExpiredError


def bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def session_expired_response():
    return jsonify({
        "error": "Session expired",
        "message": "You have been logged out due to inactivity.",
        "redirect": LOGIN_SCREEN,
    }), 401


def require_auth(f):
    """
    Require a valid session.

    Sets:
    - g.current_user: the authenticated User
    - g.session_context: the full SessionContext
    - g.token: the plaintext bearer token

    Returns 401 when the token is missing, unknown or revoked, and the
    "Session expired" body (redirect to /login) after an idle timeout.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = bearer_token()
        if not token:
            return jsonify({"error": "Authentication required", "redirect": LOGIN_SCREEN}), 401

        try:
            context = session_service.validate_session(token)
        except SessionExpiredError as exc:
            if exc.just_revoked:
                current_app.logger.info("Signed out idle session on %s %s", request.method, request.path)
            return session_expired_response()

        if not context:
            return jsonify({"error": "Invalid or expired token", "redirect": LOGIN_SCREEN}), 401

        g.current_user = context.user
        g.session_context = context
        g.token = token

        return f(*args, **kwargs)

    return decorated_function


def require_capability(capability: str):
    """Require a capability from the role table. Use after @require_auth."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = getattr(g, "current_user", None)
            if user is None:
                return jsonify({"error": "Authentication required", "redirect": LOGIN_SCREEN}), 401

            if not has_capability(user.role, capability):
                current_app.logger.warning(
                    "Denied %s to user %s (%s) on %s",
                    capability, user.id, user.role, request.path,
                )
                return jsonify({
                    "error": "Permission denied",
                    "required_capability": capability,
                    "redirect": DEFAULT_SCREEN,
                }), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator
