"""Approval workflow states and transitions.

State Machine Diagram:

    ┌──────────┐
    │ PENDING  │ ← Initial state (risk submitted for acceptance)
    └────┬─────┘
         │
         ├──────────────────┐
         │                  │
    ┌────▼─────┐      ┌─────▼────┐
    │ APPROVED │      │ REJECTED │
    └──────────┘      └──────────┘

Both decisions are terminal. A risk that needs another round gets a new
workflow record; decided records are never reopened.
"""

from enum import Enum
from typing import Dict, Optional, NamedTuple, Union


class ApprovalStatus(str, Enum):
    """States of a risk acceptance workflow."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApprovalTransition(str, Enum):
    """Actions that move a workflow between states."""

    APPROVE = "approve"   # PENDING → APPROVED
    REJECT = "reject"     # PENDING → REJECTED


class TransitionRule(NamedTuple):
    """Defines a valid state transition."""
    from_state: ApprovalStatus
    to_state: ApprovalStatus
    transition: ApprovalTransition


TRANSITION_RULES: list[TransitionRule] = [
    TransitionRule(ApprovalStatus.PENDING, ApprovalStatus.APPROVED, ApprovalTransition.APPROVE),
    TransitionRule(ApprovalStatus.PENDING, ApprovalStatus.REJECTED, ApprovalTransition.REJECT),
]

TRANSITION_TARGETS: Dict[tuple[ApprovalStatus, ApprovalTransition], TransitionRule] = {}

for rule in TRANSITION_RULES:
    TRANSITION_TARGETS[(rule.from_state, rule.transition)] = rule


INITIAL_STATE = ApprovalStatus.PENDING

# Decision values accepted on the wire. The Portuguese values are the ones
# the existing web client sends.
DECISION_ALIASES: Dict[str, ApprovalStatus] = {
    "aprovado": ApprovalStatus.APPROVED,
    "rejeitado": ApprovalStatus.REJECTED,
    "approved": ApprovalStatus.APPROVED,
    "rejected": ApprovalStatus.REJECTED,
}

DECISION_TRANSITIONS: Dict[ApprovalStatus, ApprovalTransition] = {
    ApprovalStatus.APPROVED: ApprovalTransition.APPROVE,
    ApprovalStatus.REJECTED: ApprovalTransition.REJECT,
}


def get_transition_rule(from_state: ApprovalStatus, transition: ApprovalTransition) -> Optional[TransitionRule]:
    return TRANSITION_TARGETS.get((from_state, transition))


def parse_decision(value: Union[ApprovalStatus, str]) -> ApprovalStatus:
    """Resolve a decision value to APPROVED or REJECTED.

    Raises:
        ValueError: If the value is not a decision
    """
    if isinstance(value, ApprovalStatus):
        status = value
    else:
        status = DECISION_ALIASES.get(str(value).strip().lower())
    if status not in DECISION_TRANSITIONS:
        raise ValueError(f"Invalid decision: {value!r}")
    return status
