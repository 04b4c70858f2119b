"""Persistence contract for approval workflows.

The engine only talks to an ``ApprovalWorkflowStore``. Two implementations
ship with RiskFlow: ``SQLAlchemyApprovalStore`` (see ``sql_store``) and the
in-process ``InMemoryApprovalStore`` below.

Stores are the source of truth for the two workflow invariants:

* ``add_workflow`` refuses a second pending workflow for the same risk by
  raising ``DuplicatePendingWorkflow``.
* ``update_workflow_decision`` is a compare-and-swap that only succeeds on a
  record that is still pending.
"""

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterator, List, Optional
from uuid import UUID

from riskflow.core.risk import RiskStatus

from .errors import DuplicatePendingWorkflow
from .records import RiskRecord, UserSummary, WorkflowRecord
from .states import ApprovalStatus


class ApprovalWorkflowStore(ABC):
    """Storage operations used by the approval workflow engine."""

    @abstractmethod
    def unit_of_work(self):
        """Context manager grouping writes into one atomic transaction.

        Commits when the block exits normally, rolls back everything written
        inside the block when it raises.
        """

    @abstractmethod
    def get_risk(self, org_id: UUID, risk_id: UUID) -> Optional[RiskRecord]:
        """Load a risk scoped to an organization. None if absent or foreign."""

    @abstractmethod
    def get_pending_workflow(self, risk_id: UUID) -> Optional[WorkflowRecord]:
        ...

    @abstractmethod
    def get_workflow(self, org_id: UUID, risk_id: UUID, workflow_id: UUID) -> Optional[WorkflowRecord]:
        """Load a workflow that belongs to the given risk and organization."""

    @abstractmethod
    def add_workflow(self, workflow: WorkflowRecord) -> WorkflowRecord:
        """Insert a new workflow.

        Raises:
            DuplicatePendingWorkflow: If the risk already has a pending workflow
        """

    @abstractmethod
    def update_workflow_decision(
        self,
        workflow_id: UUID,
        status: ApprovalStatus,
        comments: Optional[str],
        updated_at: datetime,
    ) -> bool:
        """Set the decision on a pending workflow.

        Returns False, without writing, when the workflow is no longer pending.
        """

    @abstractmethod
    def update_risk_status(self, risk_id: UUID, status: RiskStatus, updated_at: datetime) -> None:
        ...

    @abstractmethod
    def list_workflows(
        self,
        risk_id: UUID,
        *,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[WorkflowRecord]:
        """Workflows of a risk, newest first, with requester/approver summaries."""

    @abstractmethod
    def count_workflows(self, risk_id: UUID) -> int:
        ...


class InMemoryApprovalStore(ApprovalWorkflowStore):
    """Dictionary backed store guarded by a single re-entrant lock.

    A unit of work holds the lock for its whole duration and restores a
    snapshot of every table if the block raises.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self.risks: Dict[UUID, RiskRecord] = {}
        self.users: Dict[UUID, UserSummary] = {}
        self.workflows: Dict[UUID, WorkflowRecord] = {}
        self._sequence: Dict[UUID, int] = {}
        self._counter = 0

    # Fixtures

    def add_risk(self, risk: RiskRecord) -> RiskRecord:
        with self._lock:
            self.risks[risk.id] = risk
        return risk

    def add_user(self, user: UserSummary) -> UserSummary:
        with self._lock:
            self.users[user.id] = user
        return user

    # Contract

    @contextmanager
    def unit_of_work(self) -> Iterator["InMemoryApprovalStore"]:
        with self._lock:
            snapshot = (
                dict(self.risks),
                dict(self.workflows),
                dict(self._sequence),
                self._counter,
            )
            try:
                yield self
            except BaseException:
                self.risks, self.workflows, self._sequence, self._counter = snapshot
                raise

    def get_risk(self, org_id: UUID, risk_id: UUID) -> Optional[RiskRecord]:
        with self._lock:
            risk = self.risks.get(risk_id)
        if risk is None or risk.org_id != org_id:
            return None
        return risk

    def get_pending_workflow(self, risk_id: UUID) -> Optional[WorkflowRecord]:
        with self._lock:
            for workflow in self.workflows.values():
                if workflow.risk_id == risk_id and workflow.is_pending:
                    return self._hydrate(workflow)
        return None

    def get_workflow(self, org_id: UUID, risk_id: UUID, workflow_id: UUID) -> Optional[WorkflowRecord]:
        with self._lock:
            workflow = self.workflows.get(workflow_id)
            risk = self.risks.get(risk_id)
            if workflow is None or risk is None:
                return None
            if workflow.risk_id != risk_id or risk.org_id != org_id:
                return None
            return self._hydrate(workflow)

    def add_workflow(self, workflow: WorkflowRecord) -> WorkflowRecord:
        with self._lock:
            if workflow.is_pending and any(
                w.risk_id == workflow.risk_id and w.is_pending
                for w in self.workflows.values()
            ):
                raise DuplicatePendingWorkflow()
            stored = replace(workflow, requester=None, approver=None)
            self._counter += 1
            self.workflows[stored.id] = stored
            self._sequence[stored.id] = self._counter
            return self._hydrate(stored)

    def update_workflow_decision(
        self,
        workflow_id: UUID,
        status: ApprovalStatus,
        comments: Optional[str],
        updated_at: datetime,
    ) -> bool:
        with self._lock:
            current = self.workflows.get(workflow_id)
            if current is None or not current.is_pending:
                return False
            self.workflows[workflow_id] = replace(
                current, status=status, comments=comments, updated_at=updated_at
            )
            return True

    def update_risk_status(self, risk_id: UUID, status: RiskStatus, updated_at: datetime) -> None:
        with self._lock:
            risk = self.risks.get(risk_id)
            if risk is None:
                raise KeyError(risk_id)
            self.risks[risk_id] = replace(risk, status=status)

    def list_workflows(
        self,
        risk_id: UUID,
        *,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[WorkflowRecord]:
        with self._lock:
            items = [w for w in self.workflows.values() if w.risk_id == risk_id]
            items.sort(key=lambda w: (w.created_at, self._sequence[w.id]), reverse=True)
            end = None if limit is None else offset + limit
            return [self._hydrate(w) for w in items[offset:end]]

    def count_workflows(self, risk_id: UUID) -> int:
        with self._lock:
            return sum(1 for w in self.workflows.values() if w.risk_id == risk_id)

    def _hydrate(self, workflow: WorkflowRecord) -> WorkflowRecord:
        return replace(
            workflow,
            requester=self.users.get(workflow.requester_id, UserSummary(workflow.requester_id)),
            approver=self.users.get(workflow.approver_id, UserSummary(workflow.approver_id)),
        )
