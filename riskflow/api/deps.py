from typing import Generator, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from riskflow.core.approval import ApprovalWorkflowEngine
from riskflow.core.approval.sql_store import SQLAlchemyApprovalStore
from riskflow.core.rbac import Caller
from riskflow.core.security import decode_token
from riskflow.db.models import User
from riskflow.db.session import SessionLocal
from riskflow.services import events

bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator:
    """Database session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> User:
    """Get current authenticated user from the bearer JWT."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not credentials:
        raise credentials_exception

    user_id = decode_token(credentials.credentials)
    if not user_id:
        raise credentials_exception

    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.is_active:
        raise credentials_exception
    return user


def get_caller(current_user: User = Depends(get_current_user)) -> Caller:
    return Caller.from_user(current_user)


def get_event_notifier() -> events.EventNotifier:
    return events.get_event_notifier()


def get_workflow_engine(
    db: Session = Depends(get_db),
    notifier: events.EventNotifier = Depends(get_event_notifier),
) -> ApprovalWorkflowEngine:
    """Workflow engine bound to the request's session."""
    return ApprovalWorkflowEngine(SQLAlchemyApprovalStore(db), notifier)
