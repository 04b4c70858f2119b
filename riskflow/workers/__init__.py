"""Celery workers for RiskFlow."""

from riskflow.workers.notification_tasks import celery_app, dispatch_event

__all__ = [
    "celery_app",
    "dispatch_event",
]
