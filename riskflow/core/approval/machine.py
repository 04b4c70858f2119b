"""Approval state machine.

Checks a decision against the transition table and remembers the steps it
applied. Persisting the outcome is the engine's job.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from riskflow.common.timeutil import utcnow

from .states import ApprovalStatus, ApprovalTransition, get_transition_rule


class TransitionError(Exception):
    """Raised when a transition is not allowed from the current state."""

    def __init__(self, message: str, from_state: ApprovalStatus, transition: ApprovalTransition):
        super().__init__(message)
        self.from_state = from_state
        self.transition = transition


@dataclass(frozen=True)
class AppliedTransition:
    workflow_id: UUID
    from_state: ApprovalStatus
    to_state: ApprovalStatus
    transition: ApprovalTransition
    user_id: Optional[UUID]
    comment: Optional[str]
    at: datetime


class ApprovalStateMachine:
    """
    Status of one acceptance workflow and the decisions applied to it.

    ``pending`` is the only state with outgoing transitions.
    """

    def __init__(self, workflow_id: UUID, current_state: ApprovalStatus):
        self.workflow_id = workflow_id
        self._state = ApprovalStatus(current_state)
        self._applied: List[AppliedTransition] = []

    @property
    def state(self) -> ApprovalStatus:
        return self._state

    def transition(
        self,
        transition: ApprovalTransition,
        *,
        user_id: Optional[UUID] = None,
        comment: Optional[str] = None,
        at: Optional[datetime] = None,
    ) -> ApprovalStatus:
        """
        Apply a transition and return the new state.

        Raises:
            TransitionError: If the current state does not allow the transition
        """
        rule = get_transition_rule(self._state, transition)
        if rule is None:
            raise TransitionError(
                f"Cannot {transition.value} a workflow that is {self._state.value}",
                self._state,
                transition,
            )

        self._applied.append(AppliedTransition(
            workflow_id=self.workflow_id,
            from_state=self._state,
            to_state=rule.to_state,
            transition=transition,
            user_id=user_id,
            comment=comment,
            at=at or utcnow(),
        ))
        self._state = rule.to_state
        return self._state

    def get_history(self) -> List[AppliedTransition]:
        return list(self._applied)
