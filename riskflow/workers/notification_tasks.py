"""Celery tasks for event delivery.

The API enqueues one ``dispatch_event`` task per committed workflow or risk
change. The task fans the event out to webhooks and email recipients.
"""

import asyncio
import logging
from typing import Any, Dict
from uuid import UUID

from celery import Celery, shared_task

from riskflow.core.config import get_settings
from riskflow.db.session import SessionLocal
from riskflow.services.events import WorkflowEvent
from riskflow.services.notifications import NotificationService

logger = logging.getLogger(__name__)
settings = get_settings()

# Initialize Celery
celery_app = Celery(
    'riskflow',
    broker=settings.celery_broker,
    backend=settings.celery_backend,
)

celery_app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,
    task_routes={
        'riskflow.workers.notification_tasks.dispatch_event': {'queue': 'notifications'},
    },
    task_default_queue='default',
)


@shared_task(bind=True, max_retries=0)
def dispatch_event(self, payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deliver a workflow event.

    Webhook retries happen inside the delivery itself, so the task is
    never retried by celery.

    Args:
        payload: ``WorkflowEvent.to_payload()`` output

    Returns:
        Event name and the IDs of the notification log rows written
    """
    event = WorkflowEvent.from_payload(payload)
    db = SessionLocal()
    try:
        service = NotificationService(db=db, org_id=UUID(payload["organization_id"]))
        notification_ids = asyncio.run(service.dispatch(event))
        logger.info(f"Dispatched {event.event} for risk {event.risk_id}: {len(notification_ids)} notification(s)")
        return {"event": event.event, "notifications": notification_ids}

    except Exception:
        logger.exception(f"Dispatch failed for {event.event} on risk {event.risk_id}")
        db.rollback()
        raise

    finally:
        db.close()
