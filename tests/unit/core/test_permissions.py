"""Tests for the RBAC permission model, roles and checker."""

import asyncio

import pytest
from types import SimpleNamespace

from fastapi import HTTPException

from riskflow.core.rbac.permissions import (
    Permission, Resource, Action,
    PERMISSION_DEFINITIONS, PERMISSION_MATRIX,
)
from riskflow.core.rbac.checker import (
    PermissionChecker, has_permission, require_permission,
)
from riskflow.core.rbac.roles import (
    OrgRole, ROLE_PERMISSIONS, ADMIN_PERMISSIONS,
    MANAGER_PERMISSIONS, USER_PERMISSIONS,
    get_role_permissions, parse_role,
)


class TestPermissionModel:
    """Test permission definitions."""

    def test_permission_string_format(self):
        perm = Permission(Resource.APPROVALS, Action.SUBMIT)
        assert str(perm) == "approvals:submit"

    def test_unknown_permissions_not_defined(self):
        assert "approvals:submit" in PERMISSION_DEFINITIONS
        assert "approvals:fly" not in PERMISSION_DEFINITIONS
        assert "mirrors:read" not in PERMISSION_DEFINITIONS
        assert len(PERMISSION_DEFINITIONS) == sum(len(a) for a in PERMISSION_MATRIX.values())

    def test_definitions_cover_matrix(self):
        assert "webhooks:manage" in PERMISSION_DEFINITIONS
        assert "organization:update" in PERMISSION_DEFINITIONS


class TestRoles:
    """Test organization role permission sets."""

    def test_three_roles(self):
        assert set(ROLE_PERMISSIONS) == {OrgRole.ADMIN, OrgRole.MANAGER, OrgRole.USER}

    def test_admin_has_wildcard(self):
        assert ADMIN_PERMISSIONS == ["*:*"]

    def test_only_admin_and_manager_submit(self):
        assert "approvals:submit" in MANAGER_PERMISSIONS
        assert "approvals:submit" not in USER_PERMISSIONS

    def test_all_role_permissions_valid(self):
        for perm in MANAGER_PERMISSIONS + USER_PERMISSIONS:
            assert perm in PERMISSION_DEFINITIONS, perm

    def test_parse_role(self):
        assert parse_role("Admin") == OrgRole.ADMIN
        assert parse_role(OrgRole.USER) == OrgRole.USER
        assert parse_role("auditor") is None
        assert parse_role(None) is None

    def test_unknown_role_has_no_permissions(self):
        assert get_role_permissions("auditor") == []


class TestPermissionChecker:
    """Test PermissionChecker class."""

    def test_exact_match(self):
        checker = PermissionChecker("manager")
        assert checker.has_permission("risks:delete")
        assert not checker.has_permission("webhooks:manage")

    def test_resource_wildcard(self):
        checker = PermissionChecker("user")
        checker.permissions = frozenset(["risks:*"])
        assert checker.has_permission("risks:delete")
        assert not checker.has_permission("approvals:read")

    def test_global_wildcard(self):
        checker = PermissionChecker(OrgRole.ADMIN)
        assert checker.has_permission(Permission(Resource.APPROVALS, Action.SUBMIT))
        assert checker.has_permission("webhooks:manage")

    def test_unknown_role(self):
        checker = PermissionChecker("auditor")
        assert not checker.is_valid_role
        assert not checker.has_permission("risks:read")

    def test_any_and_all(self):
        checker = PermissionChecker("user")
        assert checker.has_any_permission(["approvals:submit", "risks:read"])
        assert not checker.has_all_permissions(["approvals:submit", "risks:read"])

    def test_has_permission_for_user(self):
        manager = SimpleNamespace(role="manager")
        user = SimpleNamespace(role="user")
        assert has_permission(manager, "approvals:submit")
        assert not has_permission(user, "approvals:submit")
        assert not has_permission(None, "risks:read")


class TestRequirePermission:
    """Test the endpoint decorator."""

    def _endpoint(self, *perms, **kwargs):
        @require_permission(*perms, **kwargs)
        async def endpoint(current_user=None):
            return "ok"
        return endpoint

    def _run(self, coro):
        return asyncio.run(coro)

    def test_allows_permitted_user(self):
        endpoint = self._endpoint("risks:read")
        assert self._run(endpoint(current_user=SimpleNamespace(role="user"))) == "ok"

    def test_rejects_missing_user(self):
        endpoint = self._endpoint("risks:read")
        with pytest.raises(HTTPException) as exc_info:
            self._run(endpoint(current_user=None))
        assert exc_info.value.status_code == 401

    def test_rejects_unknown_role(self):
        endpoint = self._endpoint("risks:read")
        with pytest.raises(HTTPException) as exc_info:
            self._run(endpoint(current_user=SimpleNamespace(role="auditor")))
        assert exc_info.value.status_code == 403

    def test_require_all(self):
        endpoint = self._endpoint("risks:read", "approvals:submit", require_all=True)
        with pytest.raises(HTTPException) as exc_info:
            self._run(endpoint(current_user=SimpleNamespace(role="user")))
        assert exc_info.value.status_code == 403
        assert self._run(endpoint(current_user=SimpleNamespace(role="manager"))) == "ok"

    def test_unknown_permission_refused_at_declaration(self):
        with pytest.raises(ValueError, match="approvals:approve"):
            self._endpoint("approvals:approve")
