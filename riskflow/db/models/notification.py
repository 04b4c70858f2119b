"""Outbound webhook configuration and delivery log models."""

import uuid
from enum import Enum
from sqlalchemy import Column, String, DateTime, JSON, ForeignKey, Boolean, Text, Integer, Uuid
from sqlalchemy.orm import relationship

from riskflow.common.timeutil import utcnow
from riskflow.db.base import Base


class NotificationChannel(str, Enum):
    """Available notification channels."""
    EMAIL = "email"
    WEBHOOK = "webhook"


class NotificationEventType(str, Enum):
    """Events that can trigger notifications."""
    WORKFLOW_SUBMITTED = "workflow.submitted"
    WORKFLOW_DECIDED = "workflow.decided"
    RISK_CREATED = "risk_created"
    RISK_STATUS_CHANGED = "risk_status_changed"


class NotificationStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class WebhookConfig(Base):
    """
    Webhook configuration for external integrations.

    Allows sending risk events to external systems like Slack, Teams, or a SIEM.
    """
    __tablename__ = "webhook_configs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)

    # Basic info
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # Webhook configuration
    url = Column(Text, nullable=False)
    method = Column(String(10), default="POST")  # POST, PUT

    # Authentication
    auth_type = Column(String(50), nullable=True)  # bearer, basic, header
    auth_value = Column(Text, nullable=True)

    # Custom headers
    headers = Column(JSON, default=dict)

    # Event subscriptions (list of NotificationEventType values)
    subscribed_events = Column(JSON, default=list)

    # Payload template (Jinja2 template for custom payloads)
    payload_template = Column(Text, nullable=True)

    # Status
    is_active = Column(Boolean, default=True)
    last_triggered_at = Column(DateTime, nullable=True)
    last_error = Column(Text, nullable=True)
    failure_count = Column(Integer, default=0)

    # Timestamps
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    organization = relationship("Organization", back_populates="webhooks")

    def subscribes_to(self, event_type: str) -> bool:
        return event_type in (self.subscribed_events or [])

    def __repr__(self) -> str:
        return f"<WebhookConfig {self.name}>"


class NotificationLog(Base):
    """
    Log of sent notifications for audit and debugging.
    """
    __tablename__ = "notification_logs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)

    # Notification details
    channel = Column(String(50), nullable=False)  # email, webhook
    event_type = Column(String(50), nullable=False)
    recipient = Column(String(255), nullable=False)  # Email address or webhook ID

    # Related entities
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    webhook_id = Column(Uuid, ForeignKey("webhook_configs.id", ondelete="SET NULL"), nullable=True)
    risk_id = Column(Uuid, ForeignKey("risks.id", ondelete="SET NULL"), nullable=True)
    workflow_id = Column(Uuid, ForeignKey("approval_workflows.id", ondelete="SET NULL"), nullable=True)

    # Payload
    subject = Column(String(512), nullable=True)
    body = Column(Text, nullable=True)
    payload = Column(JSON, nullable=True)

    # Status
    status = Column(String(50), nullable=False, default=NotificationStatus.PENDING.value)
    error_message = Column(Text, nullable=True)
    attempts = Column(Integer, default=0)

    # Timestamps
    created_at = Column(DateTime, default=utcnow, index=True)
    sent_at = Column(DateTime, nullable=True)

    # Relationships
    organization = relationship("Organization")
    user = relationship("User")
    webhook = relationship("WebhookConfig")

    def __repr__(self) -> str:
        return f"<NotificationLog {self.event_type} to {self.recipient}>"
