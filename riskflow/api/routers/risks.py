"""Risk register API endpoints."""

import logging
from enum import Enum
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import and_
from sqlalchemy.orm import Session

from riskflow.api.deps import get_current_user, get_db, get_event_notifier
from riskflow.api.schemas.common import PaginatedResponse, PaginationParams
from riskflow.api.schemas.risks import RiskCreate, RiskResponse, RiskUpdate
from riskflow.common.timeutil import utcnow
from riskflow.core.rbac import has_permission, require_permission
from riskflow.core.risk import RiskCategory, RiskStatus
from riskflow.db.models import Risk, User
from riskflow.services.events import (
    EventNotifier,
    WorkflowEvent,
    RISK_CREATED,
    RISK_STATUS_CHANGED,
    publish_safely,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/risks", tags=["risks"])


def _get_org_risk(db: Session, org_id: UUID, risk_id: UUID) -> Risk:
    risk = db.query(Risk).filter(
        and_(Risk.id == risk_id, Risk.org_id == org_id)
    ).first()
    if not risk:
        raise HTTPException(status_code=404, detail="Risk not found")
    return risk


def _check_owner(db: Session, org_id: UUID, owner_id: UUID) -> None:
    owner = db.query(User).filter(
        and_(User.id == owner_id, User.org_id == org_id)
    ).first()
    if not owner:
        raise HTTPException(status_code=400, detail="Owner must be a member of the organization")


@router.post("", response_model=RiskResponse, status_code=status.HTTP_201_CREATED)
@require_permission("risks:create")
async def create_risk(
    risk_in: RiskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    notifier: EventNotifier = Depends(get_event_notifier),
):
    """Create a risk. The owner defaults to the creator."""
    owner_id = risk_in.owner_id or current_user.id
    if owner_id != current_user.id:
        _check_owner(db, current_user.org_id, owner_id)

    risk = Risk(
        org_id=current_user.org_id,
        title=risk_in.title,
        description=risk_in.description,
        category=risk_in.category.value if risk_in.category else None,
        impact=risk_in.impact.value if risk_in.impact else None,
        probability=risk_in.probability.value if risk_in.probability else None,
        status=RiskStatus.OPEN.value,
        owner_id=owner_id,
        created_by=current_user.id,
    )
    db.add(risk)
    db.commit()
    db.refresh(risk)

    logger.info(f"Risk {risk.id} created by {current_user.id} with level {risk.risk_level}")
    publish_safely(notifier, WorkflowEvent(
        event=RISK_CREATED,
        organization_id=risk.org_id,
        risk_id=risk.id,
        new_status=risk.status,
        actor_id=current_user.id,
        occurred_at=risk.created_at,
    ))
    return RiskResponse.model_validate(risk)


@router.get("", response_model=PaginatedResponse[RiskResponse])
@require_permission("risks:list")
async def list_risks(
    page: Optional[int] = Query(None),
    page_size: Optional[int] = Query(None),
    risk_status: Optional[RiskStatus] = Query(None, alias="status"),
    category: Optional[RiskCategory] = None,
    owner_id: Optional[UUID] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List risks of the current organization, newest first."""
    params = PaginationParams.normalize(page, page_size)
    query = db.query(Risk).filter(Risk.org_id == current_user.org_id)

    if risk_status:
        query = query.filter(Risk.status == risk_status.value)
    if category:
        query = query.filter(Risk.category == category.value)
    if owner_id:
        query = query.filter(Risk.owner_id == owner_id)

    total = query.count()
    risks = query.order_by(Risk.created_at.desc()).offset(params.offset).limit(params.limit).all()

    return PaginatedResponse[RiskResponse].create(
        items=[RiskResponse.model_validate(r) for r in risks],
        total_items=total,
        page=params.page,
        page_size=params.page_size,
    )


@router.get("/{risk_id}", response_model=RiskResponse)
@require_permission("risks:read")
async def get_risk(
    risk_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get a specific risk."""
    return RiskResponse.model_validate(_get_org_risk(db, current_user.org_id, risk_id))


@router.put("/{risk_id}", response_model=RiskResponse)
@require_permission("risks:update")
async def update_risk(
    risk_id: UUID,
    risk_in: RiskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    notifier: EventNotifier = Depends(get_event_notifier),
):
    """Update a risk.

    Only the owner, an admin or a manager may edit a risk, and only admins
    and managers may hand it to another owner. Acceptance goes through the
    approval workflow only.
    """
    risk = _get_org_risk(db, current_user.org_id, risk_id)
    changes = risk_in.model_dump(exclude_unset=True)
    can_manage = has_permission(current_user, "approvals:submit")

    if risk.owner_id != current_user.id and not can_manage:
        raise HTTPException(
            status_code=403,
            detail="Only the risk owner, an admin or a manager may update this risk",
        )
    if changes.get("status") == RiskStatus.ACCEPTED:
        raise HTTPException(
            status_code=400,
            detail="Risks are accepted through the approval workflow",
        )

    # An empty owner leaves the current one in place
    if changes.get("owner_id") is None or changes["owner_id"] == risk.owner_id:
        changes.pop("owner_id", None)
    elif not can_manage:
        raise HTTPException(
            status_code=403,
            detail="Only admins and managers may reassign a risk",
        )
    else:
        _check_owner(db, current_user.org_id, changes["owner_id"])
    if "title" in changes and not changes["title"]:
        raise HTTPException(status_code=400, detail="Title cannot be empty")

    old_status = risk.status
    for field, value in changes.items():
        setattr(risk, field, value.value if isinstance(value, Enum) else value)
    risk.updated_at = utcnow()

    db.commit()
    db.refresh(risk)

    if risk.status != old_status:
        logger.info(f"Risk {risk.id} status changed from {old_status} to {risk.status} by {current_user.id}")
        publish_safely(notifier, WorkflowEvent(
            event=RISK_STATUS_CHANGED,
            organization_id=risk.org_id,
            risk_id=risk.id,
            new_status=risk.status,
            actor_id=current_user.id,
            occurred_at=risk.updated_at,
        ))
    return RiskResponse.model_validate(risk)
