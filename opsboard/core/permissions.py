"""
Opsboard: Role-based gating

Every role check in the package goes through authorize(). This is UI gating
only; the server remains the authority.
"""
from enum import Enum as PyEnum

from opsboard.core.exceptions import PermissionDenied
from opsboard.models.user import Role


class Action(str, PyEnum):
    VIEW_DASHBOARD = "view_dashboard"
    VIEW_OPERATIONS = "view_operations"
    VIEW_ITEMS = "view_items"
    EDIT_ITEMS = "edit_items"
    WRITE_NOTES = "write_notes"
    VIEW_USERS = "view_users"
    CREATE_USER = "create_user"
    EDIT_USER = "edit_user"
    TOGGLE_USER = "toggle_user"
    REMOVE_USER = "remove_user"


_EVERYONE = frozenset(Role)
_ADMIN_ONLY = frozenset({Role.ADMIN})

POLICY: dict[Action, frozenset[Role]] = {
    Action.VIEW_DASHBOARD:  _EVERYONE,
    Action.VIEW_OPERATIONS: _EVERYONE,
    Action.VIEW_ITEMS:      _EVERYONE,
    Action.WRITE_NOTES:     _EVERYONE,
    Action.EDIT_ITEMS:      frozenset({Role.ADMIN, Role.MANAGER}),
    Action.VIEW_USERS:      _ADMIN_ONLY,
    Action.CREATE_USER:     _ADMIN_ONLY,
    Action.EDIT_USER:       _ADMIN_ONLY,
    Action.TOGGLE_USER:     _ADMIN_ONLY,
    Action.REMOVE_USER:     _ADMIN_ONLY,
}

# Actions that may never target an ADMIN account
PROTECTED_TARGET_ACTIONS = frozenset({Action.TOGGLE_USER, Action.REMOVE_USER})

DENIED_MESSAGES: dict[Action, str] = {
    Action.TOGGLE_USER: "Admin accounts cannot be disabled.",
    Action.REMOVE_USER: "Admin accounts cannot be removed.",
}


def _coerce_role(role) -> Role | None:
    if role is None:
        return None
    if isinstance(role, Role):
        return role
    try:
        return Role(str(role).upper())
    except ValueError:
        return None


def authorize(role, action: Action, target_role=None) -> bool:
    """True if an actor with `role` may perform `action` (on `target_role`)."""
    actor = _coerce_role(role)
    if actor is None or actor not in POLICY.get(action, frozenset()):
        return False
    if action in PROTECTED_TARGET_ACTIONS and _coerce_role(target_role) == Role.ADMIN:
        return False
    return True


def require(role, action: Action, target_role=None) -> None:
    if authorize(role, action, target_role):
        return
    if action in PROTECTED_TARGET_ACTIONS and _coerce_role(target_role) == Role.ADMIN:
        raise PermissionDenied(DENIED_MESSAGES[action])
    raise PermissionDenied("You do not have permission to do that.")
