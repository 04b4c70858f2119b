"""Database models for RiskFlow."""

from riskflow.db.models.org import Organization
from riskflow.db.models.user import User
from riskflow.db.models.risk import Risk
from riskflow.db.models.approval import ApprovalWorkflow
from riskflow.db.models.notification import (
    WebhookConfig,
    NotificationLog,
    NotificationChannel,
    NotificationEventType,
    NotificationStatus,
)

__all__ = [
    "Organization",
    "User",
    "Risk",
    "ApprovalWorkflow",
    "WebhookConfig",
    "NotificationLog",
    "NotificationChannel",
    "NotificationEventType",
    "NotificationStatus",
]
