"""Health probes.

``/health`` and ``/health/live`` never touch a dependency. ``/health/ready``
checks the database, plus Redis when notifications are enabled (it is the
celery broker). ``/health/detailed`` adds host disk and memory usage.
"""

from typing import Dict, Any, Tuple

import psutil
import redis
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from riskflow import __version__
from riskflow.api.deps import get_db
from riskflow.common.timeutil import utcnow
from riskflow.core.config import get_settings

router = APIRouter(tags=["health"])

GIB = 1024 ** 3

# (warning, critical) percent thresholds
DISK_THRESHOLDS = (85, 95)
MEMORY_THRESHOLDS = (85, 95)

FAILING = ("unhealthy", "critical")


def check_database(db: Session) -> Dict[str, Any]:
    try:
        db.execute(text("SELECT 1")).scalar()
    except SQLAlchemyError as e:
        return {"status": "unhealthy", "error": str(e)}
    return {"status": "healthy", "dialect": db.get_bind().dialect.name}


def check_redis() -> Dict[str, Any]:
    """Ping the celery broker."""
    client = redis.from_url(get_settings().redis_url, socket_connect_timeout=2, socket_timeout=2)
    try:
        client.ping()
        version = client.info("server").get("redis_version", "unknown")
    except redis.RedisError as e:
        return {"status": "unhealthy", "error": str(e)}
    finally:
        client.close()
    return {"status": "healthy", "version": version}


def _usage_status(percent_used: float, warning: int, critical: int) -> str:
    if percent_used >= critical:
        return "critical"
    if percent_used >= warning:
        return "warning"
    return "healthy"


def check_disk() -> Dict[str, Any]:
    try:
        disk = psutil.disk_usage("/")
    except OSError as e:
        return {"status": "unknown", "error": str(e)}
    return {
        "status": _usage_status(disk.percent, *DISK_THRESHOLDS),
        "free_gb": round(disk.free / GIB, 2),
        "total_gb": round(disk.total / GIB, 2),
        "percent_used": disk.percent,
    }


def check_memory() -> Dict[str, Any]:
    memory = psutil.virtual_memory()
    return {
        "status": _usage_status(memory.percent, *MEMORY_THRESHOLDS),
        "available_gb": round(memory.available / GIB, 2),
        "total_gb": round(memory.total / GIB, 2),
        "percent_used": memory.percent,
    }


def _dependency_checks(db: Session) -> Dict[str, Dict[str, Any]]:
    checks = {"database": check_database(db)}
    if get_settings().notifications_enabled:
        checks["redis"] = check_redis()
    return checks


def _verdict(checks: Dict[str, Dict[str, Any]]) -> Tuple[str, int]:
    statuses = {check.get("status", "unknown") for check in checks.values()}
    if statuses & set(FAILING):
        return "unhealthy", status.HTTP_503_SERVICE_UNAVAILABLE
    if "warning" in statuses:
        return "degraded", status.HTTP_200_OK
    return "healthy", status.HTTP_200_OK


@router.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": utcnow().isoformat(),
    }


@router.get("/health/live")
async def liveness_probe():
    """Liveness probe. Answers as long as the process serves requests."""
    return {"status": "alive", "timestamp": utcnow().isoformat()}


@router.get("/health/ready")
async def readiness_probe(db: Session = Depends(get_db)):
    """Readiness probe. 503 while the database or the broker is unreachable."""
    checks = _dependency_checks(db)
    failed = [name for name, check in checks.items() if check["status"] in FAILING]

    body = {
        "status": "not_ready" if failed else "ready",
        "checks": checks,
        "timestamp": utcnow().isoformat(),
    }
    if failed:
        body["failed"] = failed
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body)
    return body


@router.get("/health/detailed")
async def detailed_health_check(db: Session = Depends(get_db)):
    checks = _dependency_checks(db)
    checks["disk"] = check_disk()
    checks["memory"] = check_memory()

    overall, http_status = _verdict(checks)
    return JSONResponse(
        status_code=http_status,
        content={
            "status": overall,
            "version": __version__,
            "checks": checks,
            "timestamp": utcnow().isoformat(),
        },
    )
