"""Plain records exchanged between the workflow engine and its stores."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID

from riskflow.core.risk import RiskStatus

from .states import ApprovalStatus


@dataclass(frozen=True)
class UserSummary:
    """Identity projection attached to history entries."""

    id: UUID
    name: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class RiskRecord:
    """The slice of a risk the approval workflow needs."""

    id: UUID
    org_id: UUID
    title: str
    status: RiskStatus
    owner_id: Optional[UUID] = None


@dataclass(frozen=True)
class WorkflowRecord:
    id: UUID
    risk_id: UUID
    requester_id: UUID
    approver_id: UUID
    status: ApprovalStatus
    created_at: datetime
    updated_at: datetime
    comments: Optional[str] = None
    requester: Optional[UserSummary] = field(default=None, compare=False)
    approver: Optional[UserSummary] = field(default=None, compare=False)

    @property
    def is_pending(self) -> bool:
        return self.status == ApprovalStatus.PENDING
