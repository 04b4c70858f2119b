"""Tests for approval workflow states and state machine."""

from uuid import uuid4

import pytest

from riskflow.core.approval.states import (
    ApprovalStatus, ApprovalTransition,
    TRANSITION_RULES, INITIAL_STATE,
    get_transition_rule, parse_decision,
)
from riskflow.core.approval.machine import ApprovalStateMachine, TransitionError


class TestApprovalStates:
    """Test approval state definitions."""

    def test_all_states_defined(self):
        assert {s.value for s in ApprovalStatus} == {"pending", "approved", "rejected"}

    def test_initial_state(self):
        assert INITIAL_STATE == ApprovalStatus.PENDING


class TestApprovalTransitions:
    """Test valid state transitions."""

    def test_pending_transitions(self):
        assert get_transition_rule(ApprovalStatus.PENDING, ApprovalTransition.APPROVE).to_state == ApprovalStatus.APPROVED
        assert get_transition_rule(ApprovalStatus.PENDING, ApprovalTransition.REJECT).to_state == ApprovalStatus.REJECTED

    def test_decided_states_no_outgoing(self):
        for state in (ApprovalStatus.APPROVED, ApprovalStatus.REJECTED):
            for transition in ApprovalTransition:
                assert get_transition_rule(state, transition) is None

    def test_rules_table(self):
        assert len(TRANSITION_RULES) == 2
        assert {rule.from_state for rule in TRANSITION_RULES} == {ApprovalStatus.PENDING}


class TestParseDecision:

    @pytest.mark.parametrize("value,expected", [
        ("aprovado", ApprovalStatus.APPROVED),
        ("rejeitado", ApprovalStatus.REJECTED),
        ("approved", ApprovalStatus.APPROVED),
        ("REJECTED", ApprovalStatus.REJECTED),
        (ApprovalStatus.APPROVED, ApprovalStatus.APPROVED),
    ])
    def test_accepted_values(self, value, expected):
        assert parse_decision(value) == expected

    @pytest.mark.parametrize("value", ["pending", ApprovalStatus.PENDING, "maybe", ""])
    def test_rejected_values(self, value):
        with pytest.raises(ValueError):
            parse_decision(value)


class TestApprovalStateMachine:
    """Test state machine behavior."""

    def test_approve(self):
        machine = ApprovalStateMachine(uuid4(), ApprovalStatus.PENDING)
        user_id = uuid4()

        new_state = machine.transition(ApprovalTransition.APPROVE, user_id=user_id, comment="ok")

        assert new_state == ApprovalStatus.APPROVED
        assert machine.state == ApprovalStatus.APPROVED
        history = machine.get_history()
        assert len(history) == 1
        assert history[0].from_state == ApprovalStatus.PENDING
        assert history[0].to_state == ApprovalStatus.APPROVED
        assert history[0].user_id == user_id
        assert history[0].comment == "ok"

    def test_no_transition_after_decision(self):
        machine = ApprovalStateMachine(uuid4(), ApprovalStatus.REJECTED)

        with pytest.raises(TransitionError) as exc_info:
            machine.transition(ApprovalTransition.APPROVE)
        assert exc_info.value.from_state == ApprovalStatus.REJECTED
        assert machine.get_history() == []

    def test_second_decision_refused(self):
        machine = ApprovalStateMachine(uuid4(), ApprovalStatus.PENDING)
        machine.transition(ApprovalTransition.REJECT)

        with pytest.raises(TransitionError):
            machine.transition(ApprovalTransition.APPROVE)
        assert machine.state == ApprovalStatus.REJECTED
        assert len(machine.get_history()) == 1
