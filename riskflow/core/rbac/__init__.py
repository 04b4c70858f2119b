"""RBAC (Role-Based Access Control) module for RiskFlow.

This module defines the permission model, organization roles, and the
admission guard used by the approval workflow.
"""

from .permissions import Permission, Resource, Action, PERMISSION_DEFINITIONS
from .roles import OrgRole, ROLE_PERMISSIONS, get_role_permissions
from .checker import PermissionChecker, has_permission, require_permission
from .guard import AuthorizationGuard, Caller

__all__ = [
    "Permission",
    "Resource",
    "Action",
    "PERMISSION_DEFINITIONS",
    "OrgRole",
    "ROLE_PERMISSIONS",
    "get_role_permissions",
    "PermissionChecker",
    "has_permission",
    "require_permission",
    "AuthorizationGuard",
    "Caller",
]
