"""Permission model for RiskFlow RBAC.

Defines all resources, actions, and permission combinations.
Uses a matrix approach: permissions = actions × resources.

Permission string format: "resource:action"
Examples:
  - risks:read
  - approvals:submit
  - webhooks:manage
"""

from enum import Enum
from typing import NamedTuple, FrozenSet


class Resource(str, Enum):
    """Resources that can be protected by permissions."""

    RISKS = "risks"               # Risk register entries
    APPROVALS = "approvals"       # Risk acceptance workflows
    USERS = "users"               # Organization members
    WEBHOOKS = "webhooks"         # Outbound webhook configuration
    ORGANIZATION = "organization" # Organization settings


class Action(str, Enum):
    """Actions that can be performed on resources."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    LIST = "list"

    SUBMIT = "submit"             # Submit a risk for acceptance
    MANAGE = "manage"             # Full management (create/update/delete)


class Permission(NamedTuple):
    """A permission is a combination of resource and action."""
    resource: Resource
    action: Action

    def __str__(self) -> str:
        return f"{self.resource.value}:{self.action.value}"


PERMISSION_MATRIX: dict[Resource, FrozenSet[Action]] = {
    Resource.RISKS: frozenset([
        Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE, Action.LIST,
    ]),
    Resource.APPROVALS: frozenset([
        Action.READ, Action.LIST, Action.SUBMIT,
    ]),
    Resource.USERS: frozenset([
        Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE,
        Action.LIST, Action.MANAGE,
    ]),
    Resource.WEBHOOKS: frozenset([
        Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE,
        Action.LIST, Action.MANAGE,
    ]),
    Resource.ORGANIZATION: frozenset([
        Action.READ, Action.UPDATE, Action.MANAGE,
    ]),
}


def _generate_permission_definitions() -> dict[str, Permission]:
    permissions = {}
    for resource, actions in PERMISSION_MATRIX.items():
        for action in actions:
            perm = Permission(resource, action)
            permissions[str(perm)] = perm
    return permissions


# All valid permissions as a dictionary: "resource:action" -> Permission
PERMISSION_DEFINITIONS = _generate_permission_definitions()
