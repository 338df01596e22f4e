# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

Users sign in with email and password. Passwords are hashed with bcrypt
(cost factor 12). The first account ever created becomes an admin; every
later account is created by an admin with the role they choose.
"""

import re

import bcrypt

from ..extensions import db
from ..models import Activity, NumberRecord, Reminder, SaleRecord, User
from ..models.auth import ROLE_ADMIN, ROLE_EMPLOYEE, ROLES


MIN_PASSWORD_LENGTH = 6
MIN_DISPLAY_NAME_LENGTH = 2

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class PasswordValidationError(Exception):
    """Raised when a password is too short."""


class EmailInUseError(Exception):
    """Raised when an account already exists for the email address."""


class UserValidationError(Exception):
    """Raised for a malformed email, display name or role."""


def validate_password_strength(password: str) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")


def hash_password(password: str) -> str:
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def has_users() -> bool:
    return db.session.query(User.id).first() is not None


def create_user(email: str, password: str, display_name: str, role: str = ROLE_EMPLOYEE) -> User:
    """
    Create a user account.

    The very first user is promoted to admin whatever role was requested.
    Raises EmailInUseError, PasswordValidationError or UserValidationError.
    """
    email = normalize_email(email)
    if not EMAIL_RE.match(email):
        raise UserValidationError("Please enter a valid email.")

    display_name = (display_name or "").strip()
    if len(display_name) < MIN_DISPLAY_NAME_LENGTH:
        raise UserValidationError(f"Name must be at least {MIN_DISPLAY_NAME_LENGTH} characters.")

    if role not in ROLES:
        raise UserValidationError(f"Role must be one of: {', '.join(ROLES)}")

    if db.session.query(User).filter_by(email=email).first():
        raise EmailInUseError("This email is already in use.")

    if not has_users():
        role = ROLE_ADMIN

    user = User(
        email=email,
        display_name=display_name,
        password_hash=hash_password(password),
        role=role,
        is_active=True,
    )
    db.session.add(user)
    db.session.commit()
    return user


def authenticate(email: str, password: str) -> User | None:
    """Return the active user for valid credentials, else None."""
    user = db.session.query(User).filter_by(email=normalize_email(email)).first()
    if not user or not user.is_active:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def update_profile(user: User, display_name: str) -> User:
    display_name = (display_name or "").strip()
    if len(display_name) < MIN_DISPLAY_NAME_LENGTH:
        raise UserValidationError(f"Name must be at least {MIN_DISPLAY_NAME_LENGTH} characters.")
    if display_name != user.display_name:
        _rename_owner(user.display_name, display_name)
        user.display_name = display_name
    db.session.commit()
    return user


def _rename_owner(old: str, new: str) -> None:
    """
    Move every record scoped by display name over to the new name, in the
    caller's transaction, so a renamed employee keeps their numbers,
    sales, reminders and activity history.
    """
    db.session.query(NumberRecord).filter(NumberRecord.assigned_to == old).update(
        {NumberRecord.assigned_to: new}, synchronize_session="fetch",
    )
    db.session.query(NumberRecord).filter(NumberRecord.name == old).update(
        {NumberRecord.name: new}, synchronize_session="fetch",
    )
    db.session.query(NumberRecord).filter(NumberRecord.current_location == f"Employee - {old}").update(
        {NumberRecord.current_location: f"Employee - {new}"}, synchronize_session="fetch",
    )
    db.session.query(Reminder).filter(Reminder.assigned_to == old).update(
        {Reminder.assigned_to: new}, synchronize_session="fetch",
    )
    db.session.query(Activity).filter(Activity.employee_name == old).update(
        {Activity.employee_name: new}, synchronize_session="fetch",
    )

    sales = db.session.query(SaleRecord).filter(
        SaleRecord.original_number_data["assigned_to"].as_string() == old,
    ).all()
    for sale in sales:
        # Reassign a new dict; in-place JSON edits are not tracked
        sale.original_number_data = {**sale.original_number_data, "assigned_to": new, "name": new}


def list_employee_names() -> list[str]:
    """Display names offered when assigning numbers and reminders."""
    rows = db.session.query(User.display_name).filter_by(is_active=True).order_by(User.display_name).all()
    return [name for (name,) in rows]
