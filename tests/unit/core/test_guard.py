"""Tests for the approval workflow admission guard."""

from datetime import datetime
from uuid import uuid4

import pytest

from riskflow.core.approval.records import RiskRecord, WorkflowRecord
from riskflow.core.approval.states import ApprovalStatus
from riskflow.core.rbac.guard import AuthorizationGuard, Caller
from riskflow.core.risk import RiskStatus


@pytest.fixture
def guard():
    return AuthorizationGuard()


@pytest.fixture
def org_id():
    return uuid4()


def _risk(org_id, owner_id=None):
    return RiskRecord(id=uuid4(), org_id=org_id, title="Data center flood", status=RiskStatus.OPEN, owner_id=owner_id)


def _workflow(approver_id):
    now = datetime(2026, 1, 1)
    return WorkflowRecord(
        id=uuid4(), risk_id=uuid4(), requester_id=uuid4(), approver_id=approver_id,
        status=ApprovalStatus.PENDING, created_at=now, updated_at=now,
    )


class TestCanSubmit:
    """Submission requires admin/manager of the risk's org and an owner."""

    @pytest.mark.parametrize("role", ["admin", "manager"])
    def test_privileged_roles(self, guard, org_id, role):
        caller = Caller(uuid4(), org_id, role)
        assert guard.can_submit(caller, _risk(org_id, owner_id=uuid4()))

    def test_plain_user_refused(self, guard, org_id):
        caller = Caller(uuid4(), org_id, "user")
        risk = _risk(org_id, owner_id=uuid4())
        assert not guard.has_submit_role(caller, risk)
        assert not guard.can_submit(caller, risk)

    def test_other_organization_refused(self, guard, org_id):
        caller = Caller(uuid4(), uuid4(), "admin")
        assert not guard.can_submit(caller, _risk(org_id, owner_id=uuid4()))

    def test_risk_without_owner(self, guard, org_id):
        caller = Caller(uuid4(), org_id, "admin")
        risk = _risk(org_id)
        assert guard.has_submit_role(caller, risk)
        assert not guard.can_submit(caller, risk)

    def test_fails_closed_on_ambiguous_input(self, guard, org_id):
        risk = _risk(org_id, owner_id=uuid4())
        assert not guard.can_submit(None, risk)
        assert not guard.can_submit(Caller(uuid4(), org_id, "superuser"), risk)
        assert not guard.can_submit(Caller(uuid4(), org_id, ""), risk)
        assert not guard.can_submit(Caller(uuid4(), org_id, "admin"), None)


class TestCanDecide:
    """Only the designated approver decides."""

    def test_approver_can_decide(self, guard, org_id):
        approver_id = uuid4()
        assert guard.can_decide(Caller(approver_id, org_id, "user"), _workflow(approver_id))

    def test_admin_is_not_exempt(self, guard, org_id):
        assert not guard.can_decide(Caller(uuid4(), org_id, "admin"), _workflow(uuid4()))

    def test_missing_input(self, guard, org_id):
        assert not guard.can_decide(None, _workflow(uuid4()))
        assert not guard.can_decide(Caller(uuid4(), org_id, "user"), None)


class TestCanView:

    def test_member_can_view(self, guard, org_id):
        assert guard.can_view(Caller(uuid4(), org_id, "user"), _risk(org_id))

    def test_outsider_cannot_view(self, guard, org_id):
        assert not guard.can_view(Caller(uuid4(), uuid4(), "admin"), _risk(org_id))


class TestCaller:

    def test_from_user(self):
        class _User:
            id = uuid4()
            org_id = uuid4()
            role = "manager"

        caller = Caller.from_user(_User)
        assert caller.user_id == _User.id
        assert caller.org_id == _User.org_id
        assert caller.role == "manager"
