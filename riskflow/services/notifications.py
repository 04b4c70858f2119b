"""Notification service for email and webhook delivery.

Handles:
- Webhook notifications to external systems (Slack, Google Chat, SIEM)
- Email notifications to workflow participants and to risk owners on status changes
- Retry logic for failed webhook deliveries
"""

import asyncio
import base64
import json
import logging
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional, Dict, Any, List
from uuid import UUID

import aiosmtplib
import httpx
from jinja2 import Template, TemplateError
from sqlalchemy import and_
from sqlalchemy.orm import Session

from riskflow.common.timeutil import utcnow
from riskflow.core.approval.states import ApprovalStatus
from riskflow.core.config import Settings, get_settings
from riskflow.db.models import ApprovalWorkflow, Risk, User
from riskflow.db.models.notification import (
    WebhookConfig,
    NotificationLog,
    NotificationChannel,
    NotificationEventType,
    NotificationStatus,
)
from riskflow.services.events import WorkflowEvent

logger = logging.getLogger(__name__)


# Email templates
EMAIL_TEMPLATES = {
    NotificationEventType.WORKFLOW_SUBMITTED: {
        "subject": "[RiskFlow] Risk acceptance requested: {risk_title}",
        "body": """
{requester_name} asked you to accept the following risk:

Risk: {risk_title}
Level: {risk_level} (impact {impact}, probability {probability})

Please review at: {risk_url}

---
RiskFlow
        """,
    },
    NotificationEventType.WORKFLOW_DECIDED: {
        "subject": "[RiskFlow] Risk acceptance {new_status}: {risk_title}",
        "body": """
The acceptance request for a risk has been decided:

Risk: {risk_title}
Decision: {new_status}
Decided By: {approver_name}
Comments: {comments}

Details at: {risk_url}

---
RiskFlow
        """,
    },
    NotificationEventType.RISK_STATUS_CHANGED: {
        "subject": "[RiskFlow] Risk status changed: {risk_title}",
        "body": """
The status of a risk you own has changed:

Risk: {risk_title}
New Status: {risk_status}
Level: {risk_level}

Details at: {risk_url}

---
RiskFlow
        """,
    },
}

# Plain-text messages used in the default webhook payload
WEBHOOK_MESSAGES = {
    NotificationEventType.WORKFLOW_SUBMITTED: "Risk '*{risk_title}*' submitted for acceptance to {approver_name}\nLink: {risk_url}",
    NotificationEventType.WORKFLOW_DECIDED: "Acceptance of risk '*{risk_title}*' {new_status} by {approver_name}\nLink: {risk_url}",
    NotificationEventType.RISK_CREATED: (
        "New risk created: *{risk_title}*\nDescription: {risk_description}\n"
        "Impact: {impact}, Probability: {probability}\nLink: {risk_url}"
    ),
    NotificationEventType.RISK_STATUS_CHANGED: "Status of risk '*{risk_title}*' changed to: *{risk_status}*\nLink: {risk_url}",
}


class WebhookDeliveryError(Exception):
    """Raised when a webhook could not be delivered after all attempts."""

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts


class NotificationService:
    """
    Service for sending notifications via email and webhooks.
    """

    def __init__(
        self,
        db: Session,
        org_id: UUID,
        *,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize notification service.

        Args:
            db: Database session
            org_id: Organization ID
            settings: Settings override (defaults to get_settings())
            transport: httpx transport override for webhook requests
        """
        self.db = db
        self.org_id = org_id
        self.settings = settings or get_settings()
        self.transport = transport

    async def dispatch(self, event: WorkflowEvent) -> List[str]:
        """
        Deliver an event to subscribed webhooks and affected users.

        Returns:
            List of notification log IDs
        """
        risk = self.db.query(Risk).filter(
            and_(
                Risk.id == event.risk_id,
                Risk.org_id == self.org_id,
            )
        ).first()
        if not risk:
            logger.warning(f"Risk {event.risk_id} not found, dropping {event.event}")
            return []

        workflow = None
        if event.workflow_id:
            workflow = self.db.query(ApprovalWorkflow).filter(
                ApprovalWorkflow.id == event.workflow_id
            ).first()

        context = self._build_context(event, risk, workflow)
        notification_ids = []

        for event_type in self.webhook_event_types(event):
            notification_ids.extend(await self._notify_webhooks(event_type, context, event))

        notification_ids.extend(await self._notify_users(event, context, risk, workflow))
        return notification_ids

    @staticmethod
    def webhook_event_types(event: WorkflowEvent) -> List[NotificationEventType]:
        """Webhook classes an event is delivered under.

        An approval changes the risk's status, so it also reaches
        ``risk_status_changed`` subscribers.
        """
        event_types = [NotificationEventType(event.event)]
        if (
            event_types[0] == NotificationEventType.WORKFLOW_DECIDED
            and event.new_status == ApprovalStatus.APPROVED.value
        ):
            event_types.append(NotificationEventType.RISK_STATUS_CHANGED)
        return event_types

    async def _notify_webhooks(
        self,
        event_type: NotificationEventType,
        context: Dict[str, Any],
        event: WorkflowEvent,
    ) -> List[str]:
        webhooks = self.db.query(WebhookConfig).filter(
            and_(
                WebhookConfig.org_id == self.org_id,
                WebhookConfig.is_active == True,  # noqa: E712
            )
        ).all()

        notification_ids = []
        for webhook in webhooks:
            if webhook.subscribes_to(event_type.value):
                notification_ids.append(
                    await self._send_webhook(webhook, event_type, context, event)
                )
        return notification_ids

    async def _notify_users(
        self,
        event: WorkflowEvent,
        context: Dict[str, Any],
        risk: Risk,
        workflow: Optional[ApprovalWorkflow],
    ) -> List[str]:
        if not self.settings.smtp_host:
            logger.debug("SMTP not configured, skipping email notifications")
            return []

        event_type = NotificationEventType(event.event)
        if event_type == NotificationEventType.RISK_STATUS_CHANGED:
            recipient_ids = [risk.owner_id]
        elif workflow is None:
            return []
        elif event_type == NotificationEventType.WORKFLOW_SUBMITTED:
            recipient_ids = [workflow.approver_id]
        elif event_type == NotificationEventType.WORKFLOW_DECIDED:
            recipient_ids = [workflow.requester_id, risk.owner_id]
        else:
            return []

        notification_ids = []
        seen = set()
        for user_id in recipient_ids:
            if user_id is None or user_id == event.actor_id or user_id in seen:
                continue
            seen.add(user_id)
            user = self.db.query(User).filter(User.id == user_id).first()
            if not user or not user.email:
                logger.warning(f"User {user_id} has no email address for notification")
                continue
            notification_ids.append(await self._send_email(
                to_email=user.email,
                event_type=event_type,
                context=context,
                user_id=user.id,
                event=event,
            ))
        return notification_ids

    async def _send_email(
        self,
        to_email: str,
        event_type: NotificationEventType,
        context: Dict[str, Any],
        user_id: UUID,
        event: WorkflowEvent,
    ) -> str:
        """Send an email notification."""
        template = EMAIL_TEMPLATES[event_type]
        subject = template["subject"].format(**context)
        body = template["body"].format(**context)

        log = NotificationLog(
            org_id=self.org_id,
            channel=NotificationChannel.EMAIL.value,
            event_type=event_type.value,
            recipient=to_email,
            user_id=user_id,
            risk_id=event.risk_id,
            workflow_id=event.workflow_id,
            subject=subject,
            body=body,
            status=NotificationStatus.PENDING.value,
        )
        self.db.add(log)
        self.db.flush()

        try:
            await self._deliver_email(to_email, subject, body)
            log.status = NotificationStatus.SENT.value
            log.sent_at = utcnow()
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.exception(f"Failed to send email to {to_email}")
            log.status = NotificationStatus.FAILED.value
            log.error_message = str(e)
        log.attempts = 1

        self.db.commit()
        return str(log.id)

    async def _deliver_email(self, to_email: str, subject: str, body: str) -> None:
        """Deliver the email via SMTP."""
        msg = MIMEMultipart()
        msg["From"] = f"{self.settings.smtp_from_name} <{self.settings.smtp_from_email}>"
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.attach(MIMEText(body, "plain"))

        await aiosmtplib.send(
            msg,
            hostname=self.settings.smtp_host,
            port=self.settings.smtp_port,
            username=self.settings.smtp_user,
            password=self.settings.smtp_password,
            start_tls=self.settings.smtp_use_tls,
        )

    async def _send_webhook(
        self,
        webhook: WebhookConfig,
        event_type: NotificationEventType,
        context: Dict[str, Any],
        event: WorkflowEvent,
    ) -> str:
        """Send a webhook notification and record the outcome."""
        payload = self.build_webhook_payload(webhook, event_type, context, event)

        log = NotificationLog(
            org_id=self.org_id,
            channel=NotificationChannel.WEBHOOK.value,
            event_type=event_type.value,
            recipient=webhook.name,
            webhook_id=webhook.id,
            risk_id=event.risk_id,
            workflow_id=event.workflow_id,
            payload=payload,
            status=NotificationStatus.PENDING.value,
        )
        self.db.add(log)
        self.db.flush()

        try:
            log.attempts = await self._deliver_webhook(webhook, payload)
            log.status = NotificationStatus.SENT.value
            log.sent_at = utcnow()
            webhook.last_triggered_at = utcnow()
            webhook.failure_count = 0
            webhook.last_error = None
        except WebhookDeliveryError as e:
            logger.error(f"Failed to send webhook {webhook.name} to {webhook.url}: {e}")
            log.status = NotificationStatus.FAILED.value
            log.error_message = str(e)
            log.attempts = e.attempts
            webhook.failure_count = (webhook.failure_count or 0) + 1
            webhook.last_error = str(e)

        self.db.commit()
        return str(log.id)

    async def _deliver_webhook(self, webhook: WebhookConfig, payload: Dict[str, Any]) -> int:
        """
        POST (or PUT) the payload, retrying on network errors, 5xx and 429.

        Other 4xx responses are not retried.

        Returns:
            Number of attempts made

        Raises:
            WebhookDeliveryError: If every attempt failed
        """
        headers = self._webhook_headers(webhook)
        method = (webhook.method or "POST").upper()
        max_attempts = max(self.settings.webhook_max_retries, 1)
        last_error = None

        async with httpx.AsyncClient(
            timeout=self.settings.webhook_timeout,
            transport=self.transport,
        ) as client:
            for attempt in range(1, max_attempts + 1):
                try:
                    response = await client.request(method, webhook.url, json=payload, headers=headers)
                except httpx.HTTPError as e:
                    logger.warning(f"Webhook {webhook.name} attempt {attempt}/{max_attempts} failed: {e}")
                    last_error = f"request failed: {e}"
                else:
                    if response.is_success:
                        logger.info(f"Webhook {webhook.name} delivered with status {response.status_code}")
                        return attempt

                    logger.warning(
                        f"Webhook {webhook.name} attempt {attempt}/{max_attempts} "
                        f"returned {response.status_code}"
                    )
                    last_error = f"request failed with status {response.status_code}"
                    if 400 <= response.status_code < 500 and response.status_code != 429:
                        break

                if attempt < max_attempts:
                    await asyncio.sleep(self.settings.webhook_retry_delay)

        raise WebhookDeliveryError(
            f"failed to send webhook to {webhook.url} after {attempt} attempt(s): {last_error}",
            attempts=attempt,
        )

    def _webhook_headers(self, webhook: WebhookConfig) -> Dict[str, str]:
        headers = dict(webhook.headers or {})
        headers["Content-Type"] = "application/json; charset=UTF-8"

        if webhook.auth_type == "bearer":
            headers["Authorization"] = f"Bearer {webhook.auth_value}"
        elif webhook.auth_type == "basic":
            encoded = base64.b64encode(webhook.auth_value.encode()).decode()
            headers["Authorization"] = f"Basic {encoded}"
        elif webhook.auth_type == "header":
            # auth_value is JSON: {"name": ..., "value": ...}
            try:
                auth = json.loads(webhook.auth_value)
                headers[auth["name"]] = auth["value"]
            except (ValueError, KeyError, TypeError):
                logger.warning(f"Ignoring malformed header auth on webhook {webhook.name}")
        return headers

    def build_webhook_payload(
        self,
        webhook: WebhookConfig,
        event_type: NotificationEventType,
        context: Dict[str, Any],
        event: WorkflowEvent,
    ) -> Dict[str, Any]:
        """Render the webhook's Jinja2 template, or fall back to the default payload."""
        if webhook.payload_template:
            try:
                template = Template(webhook.payload_template)
                return json.loads(template.render(event_type=event_type.value, **context))
            except (TemplateError, ValueError) as e:
                logger.warning(f"Failed to render webhook template: {e}")
        return self._build_default_webhook_payload(event_type, context, event)

    def _build_default_webhook_payload(
        self,
        event_type: NotificationEventType,
        context: Dict[str, Any],
        event: WorkflowEvent,
    ) -> Dict[str, Any]:
        payload = event.to_payload()
        payload["event"] = event_type.value
        payload["text"] = WEBHOOK_MESSAGES[event_type].format(**context)
        return payload

    def _build_context(
        self,
        event: WorkflowEvent,
        risk: Risk,
        workflow: Optional[ApprovalWorkflow],
    ) -> Dict[str, Any]:
        base_url = self.settings.frontend_base_url.rstrip("/")
        context = {
            "event": event.event,
            "new_status": event.new_status,
            "risk_id": str(risk.id),
            "risk_title": risk.title,
            "risk_description": risk.description or "",
            "risk_status": risk.status,
            "risk_level": risk.risk_level,
            "impact": risk.impact or "-",
            "probability": risk.probability or "-",
            "risk_url": f"{base_url}/risks/{risk.id}",
            "organization_id": str(self.org_id),
            "comments": "No comments provided",
            "requester_name": "-",
            "approver_name": "-",
        }
        if workflow is not None:
            context["comments"] = workflow.comments or context["comments"]
            context["requester_name"] = self._display_name(workflow.requester_id)
            context["approver_name"] = self._display_name(workflow.approver_id)
        return context

    def _display_name(self, user_id: Optional[UUID]) -> str:
        if user_id is None:
            return "-"
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            return str(user_id)
        return user.name or user.email
