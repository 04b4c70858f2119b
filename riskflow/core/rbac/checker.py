"""Permission checks for organization roles.

Endpoints declare what they need with ``require_permission``; the role of
the authenticated user decides whether the call goes through.
"""

from functools import wraps
from typing import Callable, FrozenSet, Iterable, Optional, Union

from fastapi import HTTPException, status

from .permissions import Permission, PERMISSION_DEFINITIONS
from .roles import OrgRole, get_role_permissions, parse_role

PermissionLike = Union[str, Permission]


class PermissionChecker:
    """Resolves permission strings, including wildcards, for one role."""

    def __init__(self, role: Union[OrgRole, str, None]):
        self.role: Optional[OrgRole] = parse_role(role)
        self.permissions: FrozenSet[str] = frozenset(get_role_permissions(self.role))

    @property
    def is_valid_role(self) -> bool:
        return self.role is not None

    def has_permission(self, permission: PermissionLike) -> bool:
        # "risks:*" grants every action on risks, "*:*" grants everything
        wanted = str(permission)
        resource = wanted.split(":", 1)[0]
        return not self.permissions.isdisjoint({wanted, f"{resource}:*", "*:*"})

    def has_any_permission(self, permissions: Iterable[PermissionLike]) -> bool:
        return any(self.has_permission(p) for p in permissions)

    def has_all_permissions(self, permissions: Iterable[PermissionLike]) -> bool:
        return all(self.has_permission(p) for p in permissions)


def has_permission(user, permission: PermissionLike) -> bool:
    """True when ``user`` (anything with a ``role``) holds ``permission``."""
    if user is None:
        return False
    return PermissionChecker(getattr(user, "role", None)).has_permission(permission)


def require_permission(*permissions: PermissionLike, require_all: bool = False):
    """
    Decorator for endpoints that take ``current_user`` as a dependency.

    Args:
        permissions: Permission strings or Permission objects
        require_all: Require every permission instead of any one of them

    Raises:
        ValueError: If a permission is not defined in the permission matrix

    Usage:
        @router.get("/risks")
        @require_permission("risks:list")
        async def list_risks(current_user: User = Depends(get_current_user)):
            ...
    """
    required = [str(p) for p in permissions]
    unknown = [p for p in required if p not in PERMISSION_DEFINITIONS]
    if unknown:
        raise ValueError(f"Unknown permission: {', '.join(unknown)}")

    def decorator(func: Callable):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            current_user = kwargs.get("current_user")
            if current_user is None:
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail="Authentication required",
                )

            checker = PermissionChecker(current_user.role)
            if not checker.is_valid_role:
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="User has no valid role",
                )

            check = checker.has_all_permissions if require_all else checker.has_any_permission
            if not check(required):
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail=f"Insufficient permissions. Required: {', '.join(required)}",
                )

            return await func(*args, **kwargs)

        return wrapper
    return decorator
