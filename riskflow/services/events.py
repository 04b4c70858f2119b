"""Workflow event contract.

The approval engine and the risk endpoints hand state changes to an
``EventNotifier`` after their transaction has committed. Notifiers only
enqueue; delivery (webhooks, email) happens in the celery worker.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from riskflow.common.timeutil import utcnow
from riskflow.core.config import get_settings

logger = logging.getLogger(__name__)


WORKFLOW_SUBMITTED = "workflow.submitted"
WORKFLOW_DECIDED = "workflow.decided"
RISK_CREATED = "risk_created"
RISK_STATUS_CHANGED = "risk_status_changed"


@dataclass(frozen=True)
class WorkflowEvent:
    event: str
    organization_id: UUID
    risk_id: UUID
    new_status: str
    actor_id: UUID
    workflow_id: Optional[UUID] = None
    occurred_at: Optional[datetime] = None

    def to_payload(self) -> Dict[str, Any]:
        """JSON-safe form, used as the celery task argument and webhook body."""
        occurred_at = self.occurred_at or utcnow()
        return {
            "event": self.event,
            "organization_id": str(self.organization_id),
            "risk_id": str(self.risk_id),
            "workflow_id": str(self.workflow_id) if self.workflow_id else None,
            "new_status": self.new_status,
            "actor_id": str(self.actor_id),
            "occurred_at": occurred_at.isoformat(),
        }

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "WorkflowEvent":
        workflow_id = payload.get("workflow_id")
        occurred_at = payload.get("occurred_at")
        return cls(
            event=payload["event"],
            organization_id=UUID(payload["organization_id"]),
            risk_id=UUID(payload["risk_id"]),
            workflow_id=UUID(workflow_id) if workflow_id else None,
            new_status=payload["new_status"],
            actor_id=UUID(payload["actor_id"]),
            occurred_at=datetime.fromisoformat(occurred_at) if occurred_at else None,
        )


class EventNotifier(ABC):
    """Consumer of workflow state changes."""

    @abstractmethod
    def publish(self, event: WorkflowEvent) -> None:
        ...


class NullEventNotifier(EventNotifier):
    """Discards events. Used when notifications are disabled."""

    def publish(self, event: WorkflowEvent) -> None:
        logger.debug(f"Notifications disabled, dropping {event.event} for risk {event.risk_id}")


class CeleryEventNotifier(EventNotifier):
    """Enqueues events on the notification worker without waiting for delivery."""

    def publish(self, event: WorkflowEvent) -> None:
        from riskflow.workers.notification_tasks import dispatch_event

        dispatch_event.apply_async(args=[event.to_payload()], retry=False)


def publish_safely(notifier: Optional[EventNotifier], event: WorkflowEvent) -> bool:
    """Publish an event, logging and discarding any failure.

    Returns True when the notifier accepted the event.
    """
    if notifier is None:
        return False
    try:
        notifier.publish(event)
    except Exception:
        logger.exception(f"Failed to publish {event.event} for risk {event.risk_id}")
        return False
    return True


def get_event_notifier() -> EventNotifier:
    """Notifier selected by configuration."""
    if not get_settings().notifications_enabled:
        return NullEventNotifier()
    return CeleryEventNotifier()
