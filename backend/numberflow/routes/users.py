# Overview: Flask API routes for user administration; parses input and returns JSON responses.

"""
User Routes

- Creating users and listing accounts requires MANAGE_USERS (admins)
- The employee name list (for assignment dropdowns) is open to any
  signed-in user
"""

from flask import Blueprint, jsonify

from ..decorators import require_auth, require_capability
from ..extensions import db
from ..models import User
from ..models.auth import ROLE_EMPLOYEE
from ..permissions import MANAGE_USERS, VIEW_DASHBOARD
from ..services import auth_service
from ..services.auth_service import EmailInUseError, PasswordValidationError, UserValidationError
from .helpers import json_body


users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
@require_auth
@require_capability(MANAGE_USERS)
def list_users_route():
    users = db.session.query(User).order_by(User.id).all()
    return jsonify({"items": [u.to_dict() for u in users], "count": len(users)})


@users_bp.post("")
@require_auth
@require_capability(MANAGE_USERS)
def create_user_route():
    """
    Create a user.

    Request body:
    {
        "email": "ramesh@example.com",
        "password": "secret1",           // at least 6 characters
        "display_name": "Ramesh",        // at least 2 characters
        "role": "employee"               // admin | employee
    }
    """
    data = json_body()
    try:
        user = auth_service.create_user(
            email=data.get("email"),
            password=data.get("password"),
            display_name=data.get("display_name"),
            role=data.get("role") or ROLE_EMPLOYEE,
        )
    except EmailInUseError as e:
        return jsonify({"error": str(e)}), 409
    except PasswordValidationError as e:
        return jsonify({"error": "Validation failed", "fields": {"password": str(e)}}), 400
    except UserValidationError as e:
        return jsonify({"error": "Validation failed", "fields": {"_": str(e)}}), 400

    return jsonify({
        "user": user.to_dict(),
        "notification": {
            "title": "User Created",
            "description": f"Account for {user.display_name} has been created.",
            "variant": "default",
        },
    }), 201


@users_bp.get("/employees")
@require_auth
@require_capability(VIEW_DASHBOARD)
def list_employees_route():
    return jsonify({"items": auth_service.list_employee_names()})
