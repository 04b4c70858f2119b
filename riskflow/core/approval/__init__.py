"""Risk acceptance approval workflow."""

from .states import ApprovalStatus, ApprovalTransition, TRANSITION_RULES, parse_decision
from .machine import ApprovalStateMachine, TransitionError
from .errors import (
    WorkflowError,
    Forbidden,
    InvalidState,
    Conflict,
    DuplicatePendingWorkflow,
    NotFound,
    InternalError,
)
from .records import RiskRecord, WorkflowRecord, UserSummary
from .store import ApprovalWorkflowStore, InMemoryApprovalStore
from .service import ApprovalWorkflowEngine, HistoryPage

__all__ = [
    "ApprovalStatus",
    "ApprovalTransition",
    "TRANSITION_RULES",
    "parse_decision",
    "ApprovalStateMachine",
    "TransitionError",
    "WorkflowError",
    "Forbidden",
    "InvalidState",
    "Conflict",
    "DuplicatePendingWorkflow",
    "NotFound",
    "InternalError",
    "RiskRecord",
    "WorkflowRecord",
    "UserSummary",
    "ApprovalWorkflowStore",
    "InMemoryApprovalStore",
    "ApprovalWorkflowEngine",
    "HistoryPage",
]
