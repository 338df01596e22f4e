# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

"""
Authentication API routes

- login / logout with opaque bearer tokens
- first-user signup (only while no account exists)
- session observation for the client gate (GET /session)
- input-event heartbeat that resets the idle countdown (POST /activity)
- display-name profile update
"""

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import bearer_token, require_auth
from ..services import auth_service, session_service
from ..services.auth_service import EmailInUseError, PasswordValidationError, UserValidationError


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _session_payload(user, session, token=None) -> dict:
    payload = {
        "user": user.to_dict(),
        "expires_at": session.to_dict()["expires_at"],
        "idle_timeout_seconds": int(session_service.idle_timeout().total_seconds()),
    }
    if token:
        payload["token"] = token
    return payload


@auth_bp.post("/login")
def login_route():
    """
    Authenticate with email and password.

    Returns the user, the session token and the idle timeout. The token
    goes in the Authorization header (Bearer) of every later request.
    """
    data = request.get_json(silent=True) or {}
    email = data.get("email")
    password = data.get("password")

    if not email or not password:
        return jsonify({"error": "email and password required"}), 400

    user = auth_service.authenticate(email, password)
    if not user:
        current_app.logger.info("Failed login for %s", auth_service.normalize_email(email))
        return jsonify({"error": "Invalid credentials"}), 401

    session, token = session_service.create_session(
        user_id=user.id,
        user_agent=request.headers.get("User-Agent"),
        ip_address=request.remote_addr,
    )
    return jsonify(_session_payload(user, session, token))


@auth_bp.post("/signup")
def signup_route():
    """
    Create the first account. It becomes the admin.

    Once any account exists, new users are created by an admin via
    POST /api/users.
    """
    if auth_service.has_users():
        return jsonify({"error": "Sign up is closed. Ask an administrator to create your account."}), 403

    data = request.get_json(silent=True) or {}
    try:
        user = auth_service.create_user(
            email=data.get("email"),
            password=data.get("password"),
            display_name=data.get("display_name"),
        )
    except EmailInUseError as e:
        return jsonify({"error": str(e)}), 409
    except (PasswordValidationError, UserValidationError) as e:
        return jsonify({"error": str(e)}), 400

    session, token = session_service.create_session(
        user_id=user.id,
        user_agent=request.headers.get("User-Agent"),
        ip_address=request.remote_addr,
    )
    return jsonify(_session_payload(user, session, token)), 201


@auth_bp.post("/logout")
@require_auth
def logout_route():
    session_service.revoke_session(g.token)
    return jsonify({"message": "Logged out", "redirect": "/login"})


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify(_session_payload(g.current_user, g.session_context.session))


@auth_bp.get("/session")
def session_route():
    """
    Current gate state: "authenticated" or "unauthenticated".

    Does not count as activity. Clients start in "loading" until this
    answers.
    """
    token = bearer_token()
    state = session_service.session_state(token)
    body = {"state": state, "signup_open": not auth_service.has_users()}

    if state == session_service.STATE_AUTHENTICATED:
        current_session = session_service.find_session(token)
        body["user"] = current_session.user.to_dict()
        body["seconds_until_idle"] = session_service.seconds_until_idle(current_session)
    return jsonify(body)


@auth_bp.post("/activity")
@require_auth
def activity_route():
    """
    Report a user input event (mousemove, keydown, click, touchstart).

    @require_auth already reset the countdown; the event name is checked
    so that only genuine input counts.
    """
    data = request.get_json(silent=True) or {}
    event = data.get("event")
    try:
        session_service.record_activity(g.session_context.session, event)
    except ValueError as e:
        return jsonify({"error": "Validation failed", "fields": {"event": str(e)}}), 400

    return jsonify({
        "state": session_service.STATE_AUTHENTICATED,
        "seconds_until_idle": session_service.seconds_until_idle(g.session_context.session),
    })


@auth_bp.patch("/profile")
@require_auth
def profile_route():
    data = request.get_json(silent=True) or {}
    try:
        user = auth_service.update_profile(g.current_user, data.get("display_name"))
    except UserValidationError as e:
        return jsonify({"error": "Validation failed", "fields": {"display_name": str(e)}}), 400
    return jsonify({"user": user.to_dict()})
