"""Admission rules for the risk acceptance workflow.

All checks are pure predicates over the supplied identity and records. They
never raise: anything ambiguous (missing caller, unknown role, missing ids)
is refused. The workflow engine turns a refusal into the matching error.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from .checker import PermissionChecker
from .permissions import Permission, Resource, Action
from .roles import OrgRole, parse_role


SUBMIT_PERMISSION = Permission(Resource.APPROVALS, Action.SUBMIT)


@dataclass(frozen=True)
class Caller:
    """Authenticated identity acting on the workflow."""

    user_id: UUID
    org_id: UUID
    role: str

    @classmethod
    def from_user(cls, user) -> "Caller":
        role = user.role.value if isinstance(user.role, OrgRole) else user.role
        return cls(user_id=user.id, org_id=user.org_id, role=role)


class AuthorizationGuard:
    """Decides whether a caller may submit, decide, or view a workflow."""

    def is_member(self, caller: Optional[Caller], org_id: Optional[UUID]) -> bool:
        if caller is None or caller.org_id is None or org_id is None:
            return False
        return caller.org_id == org_id

    def has_submit_role(self, caller: Optional[Caller], risk) -> bool:
        """Role half of can_submit: member of the risk's org with approvals:submit."""
        if risk is None or not self.is_member(caller, getattr(risk, "org_id", None)):
            return False
        if parse_role(caller.role) is None:
            return False
        return PermissionChecker(caller.role).has_permission(SUBMIT_PERMISSION)

    def can_submit(self, caller: Optional[Caller], risk) -> bool:
        """Admin or manager of the risk's organization, and the risk has an owner."""
        if not self.has_submit_role(caller, risk):
            return False
        return getattr(risk, "owner_id", None) is not None

    def can_decide(self, caller: Optional[Caller], workflow) -> bool:
        """Only the designated approver may decide, regardless of role."""
        if caller is None or workflow is None:
            return False
        approver_id = getattr(workflow, "approver_id", None)
        if approver_id is None or caller.user_id is None:
            return False
        return caller.user_id == approver_id

    def can_view(self, caller: Optional[Caller], risk) -> bool:
        """Any member of the risk's organization may read its approval history."""
        if risk is None:
            return False
        return self.is_member(caller, getattr(risk, "org_id", None))
