"""Risk acceptance workflow engine.

Coordinates the authorization guard, the state machine and a workflow
store. The engine never talks to a database or an HTTP client directly:
everything goes through the store contract and the event notifier.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from math import ceil
from typing import Callable, List, Optional
from uuid import UUID, uuid4

from riskflow.common.timeutil import utcnow
from riskflow.core.rbac.guard import AuthorizationGuard, Caller
from riskflow.core.risk import RiskStatus
from riskflow.services.events import (
    EventNotifier,
    WorkflowEvent,
    WORKFLOW_DECIDED,
    WORKFLOW_SUBMITTED,
    publish_safely,
)

from .errors import (
    Conflict,
    DuplicatePendingWorkflow,
    Forbidden,
    InternalError,
    InvalidState,
    NotFound,
    WorkflowError,
)
from .machine import ApprovalStateMachine, TransitionError
from .records import RiskRecord, WorkflowRecord
from .states import ApprovalStatus, DECISION_TRANSITIONS, INITIAL_STATE, parse_decision
from .store import ApprovalWorkflowStore

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class HistoryPage:
    items: List[WorkflowRecord]
    total_items: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        if self.total_items == 0:
            return 0
        return ceil(self.total_items / self.page_size)


class ApprovalWorkflowEngine:
    """
    Submits risks for acceptance and records the approver's decision.

    Guarantees:
    - at most one pending workflow per risk
    - only the designated approver decides, and only once
    - an approval moves the risk to ``accepted`` in the same transaction
    """

    def __init__(
        self,
        store: ApprovalWorkflowStore,
        notifier: Optional[EventNotifier] = None,
        *,
        guard: Optional[AuthorizationGuard] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Initialize the engine.

        Args:
            store: Workflow persistence
            notifier: Receives events after each committed change (optional)
            guard: Admission rules (defaults to AuthorizationGuard)
            clock: Source of timestamps
        """
        self.store = store
        self.notifier = notifier
        self.guard = guard or AuthorizationGuard()
        self.clock = clock

    def submit(self, caller: Caller, risk_id: UUID) -> WorkflowRecord:
        """
        Open an acceptance workflow for a risk, addressed to its owner.

        Raises:
            NotFound: Risk does not exist in the caller's organization
            Forbidden: Caller is not an admin or manager of the organization
            InvalidState: Risk has no owner
            Conflict: A workflow is already pending for the risk
            InternalError: Storage failure
        """
        risk = self._load_risk(caller, risk_id)

        if not self.guard.has_submit_role(caller, risk):
            raise Forbidden("only admins and managers may submit a risk for acceptance")
        if not self.guard.can_submit(caller, risk):
            raise InvalidState("risk has no owner")

        if self._storage(self.store.get_pending_workflow, risk.id):
            logger.warning(f"Rejected submission for risk {risk.id}: approval already pending")
            raise Conflict("approval already pending")

        now = self.clock()
        record = WorkflowRecord(
            id=uuid4(),
            risk_id=risk.id,
            requester_id=caller.user_id,
            approver_id=risk.owner_id,
            status=INITIAL_STATE,
            comments=None,
            created_at=now,
            updated_at=now,
        )

        try:
            with self.store.unit_of_work():
                created = self.store.add_workflow(record)
        except DuplicatePendingWorkflow as exc:
            logger.warning(f"Rejected submission for risk {risk.id}: concurrent pending workflow")
            raise Conflict("approval already pending") from exc
        except WorkflowError:
            raise
        except Exception as exc:
            logger.exception(f"Failed to create approval workflow for risk {risk.id}")
            raise InternalError() from exc

        logger.info(
            f"Risk {risk.id} submitted for acceptance by {caller.user_id}, "
            f"workflow {created.id} assigned to {created.approver_id}"
        )
        publish_safely(self.notifier, WorkflowEvent(
            event=WORKFLOW_SUBMITTED,
            organization_id=risk.org_id,
            risk_id=risk.id,
            workflow_id=created.id,
            new_status=created.status.value,
            actor_id=caller.user_id,
            occurred_at=now,
        ))
        return created

    def decide(
        self,
        caller: Caller,
        risk_id: UUID,
        workflow_id: UUID,
        decision,
        comments: Optional[str] = None,
    ) -> WorkflowRecord:
        """
        Approve or reject a pending workflow.

        Approving also moves the risk to ``accepted``; both writes commit
        together or not at all.

        Raises:
            InvalidState: Decision is not approved/rejected
            NotFound: Workflow does not exist for this risk and organization
            Forbidden: Caller is not the designated approver
            Conflict: Workflow was already decided
            InternalError: Storage failure
        """
        try:
            target = parse_decision(decision)
        except ValueError as exc:
            raise InvalidState("decision must be approved or rejected") from exc

        if caller is None:
            raise Forbidden()

        workflow = self._storage(self.store.get_workflow, caller.org_id, risk_id, workflow_id)
        if not workflow:
            raise NotFound("approval workflow not found")

        if not self.guard.can_decide(caller, workflow):
            raise Forbidden("only the designated approver may decide")

        if not workflow.is_pending:
            logger.warning(f"Rejected decision on workflow {workflow.id}: already {workflow.status.value}")
            raise Conflict("workflow already decided")

        now = self.clock()
        machine = ApprovalStateMachine(workflow.id, workflow.status)
        try:
            new_status = machine.transition(
                DECISION_TRANSITIONS[target],
                user_id=caller.user_id,
                comment=comments,
                at=now,
            )
        except TransitionError as exc:
            raise Conflict("workflow already decided") from exc

        comments = comments or None
        try:
            with self.store.unit_of_work():
                if not self.store.update_workflow_decision(workflow.id, new_status, comments, now):
                    raise Conflict("workflow already decided")
                if new_status == ApprovalStatus.APPROVED:
                    self.store.update_risk_status(workflow.risk_id, RiskStatus.ACCEPTED, now)
        except Conflict:
            logger.warning(f"Rejected decision on workflow {workflow.id}: decided concurrently")
            raise
        except WorkflowError:
            raise
        except Exception as exc:
            logger.exception(f"Failed to record decision on workflow {workflow.id}")
            raise InternalError() from exc

        decided = replace(workflow, status=new_status, comments=comments, updated_at=now)
        for step in machine.get_history():
            logger.info(
                f"Workflow {step.workflow_id} for risk {decided.risk_id} moved "
                f"{step.from_state.value} -> {step.to_state.value} ({step.transition.value}) by {step.user_id}"
            )

        publish_safely(self.notifier, WorkflowEvent(
            event=WORKFLOW_DECIDED,
            organization_id=caller.org_id,
            risk_id=decided.risk_id,
            workflow_id=decided.id,
            new_status=new_status.value,
            actor_id=caller.user_id,
            occurred_at=now,
        ))
        return decided

    def history(
        self,
        caller: Caller,
        risk_id: UUID,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> HistoryPage:
        """One page of a risk's workflows, newest first."""
        risk = self._load_visible_risk(caller, risk_id)

        page = max(page or 1, 1)
        page_size = min(max(page_size or DEFAULT_PAGE_SIZE, 1), MAX_PAGE_SIZE)

        total = self._storage(self.store.count_workflows, risk.id)
        items = self._storage(
            self.store.list_workflows,
            risk.id,
            offset=(page - 1) * page_size,
            limit=page_size,
        )
        return HistoryPage(items=items, total_items=total, page=page, page_size=page_size)

    def history_all(self, caller: Caller, risk_id: UUID) -> List[WorkflowRecord]:
        risk = self._load_visible_risk(caller, risk_id)
        return self._storage(self.store.list_workflows, risk.id)

    def _load_risk(self, caller: Optional[Caller], risk_id: UUID) -> RiskRecord:
        if caller is None:
            raise Forbidden()
        risk = self._storage(self.store.get_risk, caller.org_id, risk_id)
        if not risk:
            raise NotFound("risk not found")
        return risk

    def _load_visible_risk(self, caller: Optional[Caller], risk_id: UUID) -> RiskRecord:
        risk = self._load_risk(caller, risk_id)
        if not self.guard.can_view(caller, risk):
            raise NotFound("risk not found")
        return risk

    @staticmethod
    def _storage(operation, *args, **kwargs):
        """Run a read against the store, surfacing failures as InternalError."""
        try:
            return operation(*args, **kwargs)
        except WorkflowError:
            raise
        except Exception as exc:
            logger.exception(f"Storage read failed in {operation.__name__}")
            raise InternalError() from exc
