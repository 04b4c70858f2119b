"""Factory functions for creating test database records.

Each factory creates a model instance, adds it to the session, and flushes
so that database-generated fields (id, created_at, etc.) are populated.
All fields have sensible defaults but can be overridden via keyword arguments.

Usage::

    from tests.factories import create_organization, create_user, create_risk

    def test_something(db_session):
        org = create_organization(db_session, name="Acme")
        owner = create_user(db_session, org=org)
        risk = create_risk(db_session, org=org, owner=owner)
        assert risk.owner_id == owner.id
"""

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from riskflow.core.security import create_access_token
from riskflow.services.events import EventNotifier
from riskflow.db.models import (
    ApprovalWorkflow,
    Organization,
    Risk,
    User,
    WebhookConfig,
)


_counter = 0


def _next_id() -> int:
    """Return a monotonically increasing integer for unique default values."""
    global _counter
    _counter += 1
    return _counter


# ---------------------------------------------------------------------------
# Organization
# ---------------------------------------------------------------------------


def create_organization(
    session: Session,
    *,
    name: Optional[str] = None,
    slug: Optional[str] = None,
) -> Organization:
    n = _next_id()
    org = Organization(
        name=name or f"Test Org {n}",
        slug=slug or f"test-org-{n}",
        settings={},
    )
    session.add(org)
    session.flush()
    return org


# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------


def create_user(
    session: Session,
    *,
    org: Optional[Organization] = None,
    role: str = "user",
    email: Optional[str] = None,
    name: Optional[str] = None,
    is_active: bool = True,
) -> User:
    if org is None:
        org = create_organization(session)
    n = _next_id()
    user = User(
        email=email or f"user{n}@example.com",
        name=name or f"Test User {n}",
        org_id=org.id,
        role=role,
        is_active=is_active,
    )
    session.add(user)
    session.flush()
    return user


def auth_headers(user: User) -> dict:
    """Bearer header for a user."""
    token = create_access_token(user.id, org_id=user.org_id, role=user.role)
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# Risk
# ---------------------------------------------------------------------------


def create_risk(
    session: Session,
    *,
    org: Optional[Organization] = None,
    owner: Optional[User] = None,
    title: Optional[str] = None,
    impact: Optional[str] = "high",
    probability: Optional[str] = "medium",
    status: str = "open",
    category: Optional[str] = "operational",
) -> Risk:
    if org is None:
        org = owner.organization if owner is not None else create_organization(session)
    risk = Risk(
        org_id=org.id,
        title=title or f"Test Risk {_next_id()}",
        description="Risk created by the test factory",
        category=category,
        impact=impact,
        probability=probability,
        status=status,
        owner_id=owner.id if owner else None,
        created_by=owner.id if owner else None,
    )
    session.add(risk)
    session.flush()
    return risk


# ---------------------------------------------------------------------------
# ApprovalWorkflow
# ---------------------------------------------------------------------------


def create_workflow(
    session: Session,
    *,
    risk: Risk,
    requester: User,
    approver: Optional[User] = None,
    status: str = "pending",
    comments: Optional[str] = None,
) -> ApprovalWorkflow:
    workflow = ApprovalWorkflow(
        risk_id=risk.id,
        requester_id=requester.id,
        approver_id=(approver or requester).id,
        status=status,
        comments=comments,
    )
    session.add(workflow)
    session.flush()
    return workflow


# ---------------------------------------------------------------------------
# WebhookConfig
# ---------------------------------------------------------------------------


def create_webhook(
    session: Session,
    *,
    org: Organization,
    url: str = "https://hooks.example.com/riskflow",
    subscribed_events: Optional[list] = None,
    payload_template: Optional[str] = None,
    is_active: bool = True,
    name: Optional[str] = None,
    auth_type: Optional[str] = None,
    auth_value: Optional[str] = None,
) -> WebhookConfig:
    webhook = WebhookConfig(
        org_id=org.id,
        name=name or f"hook-{_next_id()}",
        url=url,
        method="POST",
        headers={},
        subscribed_events=subscribed_events if subscribed_events is not None else [
            "workflow.submitted",
            "workflow.decided",
        ],
        payload_template=payload_template,
        is_active=is_active,
        auth_type=auth_type,
        auth_value=auth_value,
        failure_count=0,
    )
    session.add(webhook)
    session.flush()
    return webhook


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------


class RecordingNotifier(EventNotifier):
    """Notifier that keeps published events in memory."""

    def __init__(self):
        self.events = []

    def publish(self, event):
        self.events.append(event)

    @property
    def names(self):
        return [e.event for e in self.events]


class FailingNotifier(EventNotifier):
    """Notifier whose broker is down."""

    def publish(self, event):
        raise ConnectionError("broker unavailable")


class FakeClock:
    """Deterministic clock: every call advances one second."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, 9, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now
