"""Organization role definitions for RiskFlow.

Every user holds exactly one role inside their organization:
1. Admin - Full access, including user and webhook management
2. Manager - Runs the risk register and submits risks for acceptance
3. User - Works on risks, can view approval history
"""

from enum import Enum
from typing import Dict, List, Optional, Union

from .permissions import Resource, Action, Permission


class OrgRole(str, Enum):
    """Roles a user can hold within an organization."""

    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"


def _build_permissions(*perms: tuple) -> List[str]:
    """Build permission strings from (Resource, Action) tuples."""
    return [str(Permission(r, a)) for r, a in perms]


ADMIN_PERMISSIONS = [
    "*:*"
]

MANAGER_PERMISSIONS = _build_permissions(
    (Resource.RISKS, Action.CREATE),
    (Resource.RISKS, Action.READ),
    (Resource.RISKS, Action.UPDATE),
    (Resource.RISKS, Action.DELETE),
    (Resource.RISKS, Action.LIST),

    (Resource.APPROVALS, Action.READ),
    (Resource.APPROVALS, Action.LIST),
    (Resource.APPROVALS, Action.SUBMIT),

    (Resource.USERS, Action.READ),
    (Resource.USERS, Action.LIST),

    (Resource.ORGANIZATION, Action.READ),
)

USER_PERMISSIONS = _build_permissions(
    (Resource.RISKS, Action.CREATE),
    (Resource.RISKS, Action.READ),
    (Resource.RISKS, Action.UPDATE),
    (Resource.RISKS, Action.LIST),

    (Resource.APPROVALS, Action.READ),
    (Resource.APPROVALS, Action.LIST),

    (Resource.USERS, Action.READ),
    (Resource.USERS, Action.LIST),
)


ROLE_PERMISSIONS: Dict[OrgRole, List[str]] = {
    OrgRole.ADMIN: ADMIN_PERMISSIONS,
    OrgRole.MANAGER: MANAGER_PERMISSIONS,
    OrgRole.USER: USER_PERMISSIONS,
}


def parse_role(role: Union[OrgRole, str, None]) -> Optional[OrgRole]:
    """Return the OrgRole for a role value, or None when it is unknown."""
    if isinstance(role, OrgRole):
        return role
    if not role:
        return None
    try:
        return OrgRole(str(role).strip().lower())
    except ValueError:
        return None


def get_role_permissions(role: Union[OrgRole, str, None]) -> List[str]:
    """Get the permission list for a role. Unknown roles get no permissions."""
    parsed = parse_role(role)
    if parsed is None:
        return []
    return list(ROLE_PERMISSIONS[parsed])
