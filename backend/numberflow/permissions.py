# Overview: Declarative role -> capability table checked at one authorization boundary.

"""
Capabilities

Every screen and action an authenticated caller can reach is named here.
Routes declare the capability they need with @require_capability; nothing
else in the codebase branches on role for access control.
"""

from __future__ import annotations

from numberflow.models.auth import ROLE_ADMIN, ROLE_EMPLOYEE


# Screen a denied caller is sent back to
DEFAULT_SCREEN = "/dashboard"
LOGIN_SCREEN = "/login"

VIEW_DASHBOARD = "VIEW_DASHBOARD"
VIEW_NUMBERS = "VIEW_NUMBERS"
MANAGE_NUMBERS = "MANAGE_NUMBERS"
ASSIGN_NUMBERS = "ASSIGN_NUMBERS"
IMPORT_NUMBERS = "IMPORT_NUMBERS"
EXPORT_DATA = "EXPORT_DATA"
VIEW_PURCHASES = "VIEW_PURCHASES"
MANAGE_PURCHASES = "MANAGE_PURCHASES"
VIEW_SALES = "VIEW_SALES"
MANAGE_SALES = "MANAGE_SALES"
VIEW_PORT_OUTS = "VIEW_PORT_OUTS"
MANAGE_PORT_OUTS = "MANAGE_PORT_OUTS"
VIEW_DEALER_PURCHASES = "VIEW_DEALER_PURCHASES"
MANAGE_DEALER_PURCHASES = "MANAGE_DEALER_PURCHASES"
VIEW_REMINDERS = "VIEW_REMINDERS"
MANAGE_REMINDERS = "MANAGE_REMINDERS"
COMPLETE_REMINDERS = "COMPLETE_REMINDERS"
VIEW_ACTIVITIES = "VIEW_ACTIVITIES"
MANAGE_USERS = "MANAGE_USERS"

ALL_CAPABILITIES = frozenset({
    VIEW_DASHBOARD,
    VIEW_NUMBERS,
    MANAGE_NUMBERS,
    ASSIGN_NUMBERS,
    IMPORT_NUMBERS,
    EXPORT_DATA,
    VIEW_PURCHASES,
    MANAGE_PURCHASES,
    VIEW_SALES,
    MANAGE_SALES,
    VIEW_PORT_OUTS,
    MANAGE_PORT_OUTS,
    VIEW_DEALER_PURCHASES,
    MANAGE_DEALER_PURCHASES,
    VIEW_REMINDERS,
    MANAGE_REMINDERS,
    COMPLETE_REMINDERS,
    VIEW_ACTIVITIES,
    MANAGE_USERS,
})

ROLE_CAPABILITIES: dict[str, frozenset[str]] = {
    ROLE_ADMIN: ALL_CAPABILITIES,
    # Admin only: user creation, assignment, port-out payments, activity log
    ROLE_EMPLOYEE: ALL_CAPABILITIES - {
        ASSIGN_NUMBERS,
        MANAGE_PORT_OUTS,
        VIEW_ACTIVITIES,
        MANAGE_USERS,
    },
}


def capabilities_for(role: str | None) -> frozenset[str]:
    return ROLE_CAPABILITIES.get(role or "", frozenset())


def has_capability(role: str | None, capability: str) -> bool:
    return capability in capabilities_for(role)
