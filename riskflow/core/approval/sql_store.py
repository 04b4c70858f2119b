"""SQLAlchemy implementation of the approval workflow store."""

from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional
from uuid import UUID

from sqlalchemy import and_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, aliased

from riskflow.core.risk import RiskStatus
from riskflow.db.models import ApprovalWorkflow, Risk, User
from riskflow.db.models.approval import PENDING_INDEX_NAME

from .errors import DuplicatePendingWorkflow
from .records import RiskRecord, UserSummary, WorkflowRecord
from .states import ApprovalStatus
from .store import ApprovalWorkflowStore


class SQLAlchemyApprovalStore(ApprovalWorkflowStore):
    """
    Store backed by a request-scoped SQLAlchemy session.

    The partial unique index on pending workflows and the conditional
    ``UPDATE ... WHERE status = 'pending'`` make the database the arbiter
    when requests race each other.
    """

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def unit_of_work(self) -> Iterator["SQLAlchemyApprovalStore"]:
        try:
            yield self
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def get_risk(self, org_id: UUID, risk_id: UUID) -> Optional[RiskRecord]:
        risk = self.db.query(Risk).filter(
            and_(
                Risk.id == risk_id,
                Risk.org_id == org_id,
            )
        ).populate_existing().first()

        if not risk:
            return None
        return RiskRecord(
            id=risk.id,
            org_id=risk.org_id,
            title=risk.title,
            status=RiskStatus(risk.status),
            owner_id=risk.owner_id,
        )

    def get_pending_workflow(self, risk_id: UUID) -> Optional[WorkflowRecord]:
        row = self._workflow_query().filter(
            and_(
                ApprovalWorkflow.risk_id == risk_id,
                ApprovalWorkflow.status == ApprovalStatus.PENDING.value,
            )
        ).first()
        return self._to_record(row) if row else None

    def get_workflow(self, org_id: UUID, risk_id: UUID, workflow_id: UUID) -> Optional[WorkflowRecord]:
        row = self._workflow_query().join(
            Risk, Risk.id == ApprovalWorkflow.risk_id
        ).filter(
            and_(
                ApprovalWorkflow.id == workflow_id,
                ApprovalWorkflow.risk_id == risk_id,
                Risk.org_id == org_id,
            )
        ).first()
        return self._to_record(row) if row else None

    def add_workflow(self, workflow: WorkflowRecord) -> WorkflowRecord:
        row = ApprovalWorkflow(
            id=workflow.id,
            risk_id=workflow.risk_id,
            requester_id=workflow.requester_id,
            approver_id=workflow.approver_id,
            status=workflow.status.value,
            comments=workflow.comments,
            created_at=workflow.created_at,
            updated_at=workflow.updated_at,
        )
        self.db.add(row)
        try:
            self.db.flush()
        except IntegrityError as exc:
            if _is_pending_violation(exc):
                raise DuplicatePendingWorkflow() from exc
            raise

        return self.get_workflow_by_id(workflow.id)

    def get_workflow_by_id(self, workflow_id: UUID) -> Optional[WorkflowRecord]:
        row = self._workflow_query().filter(ApprovalWorkflow.id == workflow_id).first()
        return self._to_record(row) if row else None

    def update_workflow_decision(
        self,
        workflow_id: UUID,
        status: ApprovalStatus,
        comments: Optional[str],
        updated_at: datetime,
    ) -> bool:
        result = self.db.execute(
            update(ApprovalWorkflow)
            .where(
                and_(
                    ApprovalWorkflow.id == workflow_id,
                    ApprovalWorkflow.status == ApprovalStatus.PENDING.value,
                )
            )
            .values(status=status.value, comments=comments, updated_at=updated_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def update_risk_status(self, risk_id: UUID, status: RiskStatus, updated_at: datetime) -> None:
        risk = self.db.get(Risk, risk_id)
        if not risk:
            raise LookupError(f"Risk {risk_id} not found")
        risk.status = status.value
        risk.updated_at = updated_at
        self.db.flush()

    def list_workflows(
        self,
        risk_id: UUID,
        *,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[WorkflowRecord]:
        query = self._workflow_query().filter(
            ApprovalWorkflow.risk_id == risk_id
        ).order_by(
            ApprovalWorkflow.created_at.desc(),
            ApprovalWorkflow.id.desc(),
        )
        query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return [self._to_record(row) for row in query.all()]

    def count_workflows(self, risk_id: UUID) -> int:
        return self.db.query(ApprovalWorkflow).filter(
            ApprovalWorkflow.risk_id == risk_id
        ).count()

    def _workflow_query(self):
        """Workflow rows joined to requester and approver identities."""
        requester = aliased(User)
        approver = aliased(User)
        return self.db.query(
            ApprovalWorkflow,
            requester.name,
            requester.email,
            approver.name,
            approver.email,
        ).outerjoin(
            requester, requester.id == ApprovalWorkflow.requester_id
        ).outerjoin(
            approver, approver.id == ApprovalWorkflow.approver_id
        ).populate_existing()

    @staticmethod
    def _to_record(row) -> WorkflowRecord:
        workflow, requester_name, requester_email, approver_name, approver_email = row
        return WorkflowRecord(
            id=workflow.id,
            risk_id=workflow.risk_id,
            requester_id=workflow.requester_id,
            approver_id=workflow.approver_id,
            status=ApprovalStatus(workflow.status),
            comments=workflow.comments,
            created_at=workflow.created_at,
            updated_at=workflow.updated_at,
            requester=UserSummary(workflow.requester_id, requester_name, requester_email),
            approver=UserSummary(workflow.approver_id, approver_name, approver_email),
        )


def _is_pending_violation(exc: IntegrityError) -> bool:
    """True when the error comes from the single pending workflow index."""
    message = str(exc.orig).lower()
    return PENDING_INDEX_NAME in message or "approval_workflows.risk_id" in message
