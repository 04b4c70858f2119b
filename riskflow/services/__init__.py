"""Services for RiskFlow: workflow events and their delivery."""

from riskflow.services.events import (
    WorkflowEvent,
    EventNotifier,
    NullEventNotifier,
    CeleryEventNotifier,
    get_event_notifier,
    publish_safely,
)

__all__ = [
    "WorkflowEvent",
    "EventNotifier",
    "NullEventNotifier",
    "CeleryEventNotifier",
    "get_event_notifier",
    "publish_safely",
]
