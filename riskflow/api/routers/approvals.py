"""Risk acceptance workflow API endpoints."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from riskflow.api.deps import get_caller, get_current_user, get_workflow_engine
from riskflow.api.errors import to_http_exception
from riskflow.api.schemas.common import ErrorResponse, PaginatedResponse, PaginationParams
from riskflow.core.approval import ApprovalStatus, ApprovalWorkflowEngine, WorkflowError
from riskflow.core.rbac import Caller, require_permission
from riskflow.db.models import User


router = APIRouter(prefix="/risks", tags=["approvals"])

WORKFLOW_ERRORS = {
    code: {"model": ErrorResponse} for code in (400, 403, 404, 409, 500)
}


# Schemas
class UserSummaryResponse(BaseModel):
    id: UUID
    name: Optional[str] = None
    email: Optional[str] = None

    class Config:
        from_attributes = True


class ApprovalWorkflowResponse(BaseModel):
    id: UUID
    risk_id: UUID
    requester_id: UUID
    approver_id: UUID
    status: ApprovalStatus
    comments: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    requester: Optional[UserSummaryResponse] = None
    approver: Optional[UserSummaryResponse] = None

    class Config:
        from_attributes = True


class DecisionRequest(BaseModel):
    decision: str = Field(..., description='"aprovado" or "rejeitado" (also "approved" / "rejected")')
    comments: Optional[str] = None


# Endpoints
@router.post(
    "/{risk_id}/submit-acceptance",
    response_model=ApprovalWorkflowResponse,
    status_code=status.HTTP_201_CREATED,
    responses=WORKFLOW_ERRORS,
)
async def submit_risk_acceptance(
    risk_id: UUID,
    caller: Caller = Depends(get_caller),
    engine: ApprovalWorkflowEngine = Depends(get_workflow_engine),
):
    """Submit a risk for acceptance by its owner."""
    try:
        workflow = engine.submit(caller, risk_id)
    except WorkflowError as e:
        raise to_http_exception(e) from e
    return ApprovalWorkflowResponse.model_validate(workflow)


@router.post(
    "/{risk_id}/approval/{approval_id}/decide",
    response_model=ApprovalWorkflowResponse,
    responses=WORKFLOW_ERRORS,
)
async def decide_risk_acceptance(
    risk_id: UUID,
    approval_id: UUID,
    body: DecisionRequest,
    caller: Caller = Depends(get_caller),
    engine: ApprovalWorkflowEngine = Depends(get_workflow_engine),
):
    """Approve or reject a pending acceptance request. Only the designated approver may decide."""
    try:
        workflow = engine.decide(caller, risk_id, approval_id, body.decision, body.comments)
    except WorkflowError as e:
        raise to_http_exception(e) from e
    return ApprovalWorkflowResponse.model_validate(workflow)


@router.get(
    "/{risk_id}/approval-history",
    response_model=PaginatedResponse[ApprovalWorkflowResponse],
)
@require_permission("approvals:read")
async def get_approval_history(
    risk_id: UUID,
    page: Optional[int] = Query(None, description="Page number (default 1)"),
    page_size: Optional[int] = Query(None, description="Items per page (default 10, max 100)"),
    current_user: User = Depends(get_current_user),
    engine: ApprovalWorkflowEngine = Depends(get_workflow_engine),
):
    """List a risk's acceptance workflows, newest first."""
    params = PaginationParams.normalize(page, page_size)
    try:
        history = engine.history(Caller.from_user(current_user), risk_id, params.page, params.page_size)
    except WorkflowError as e:
        raise to_http_exception(e) from e

    return PaginatedResponse[ApprovalWorkflowResponse].create(
        items=[ApprovalWorkflowResponse.model_validate(w) for w in history.items],
        total_items=history.total_items,
        page=history.page,
        page_size=history.page_size,
    )
