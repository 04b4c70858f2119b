"""Risk acceptance workflow model."""

import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Index, Uuid, text
from sqlalchemy.orm import relationship

from riskflow.common.timeutil import utcnow
from riskflow.db.base import Base


PENDING_INDEX_NAME = "uq_approval_workflows_pending_risk"


class ApprovalWorkflow(Base):
    """
    One request to accept a risk.

    A risk may have many workflows over time but at most one pending at once,
    which the partial unique index enforces. Decided rows are never modified.
    """
    __tablename__ = "approval_workflows"
    __table_args__ = (
        Index(
            PENDING_INDEX_NAME,
            "risk_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    risk_id = Column(Uuid, ForeignKey("risks.id", ondelete="CASCADE"), nullable=False, index=True)

    requester_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    approver_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)

    status = Column(String(50), nullable=False, default="pending", index=True)
    comments = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow)

    # Relationships
    risk = relationship("Risk", back_populates="approval_workflows")
    requester = relationship("User", foreign_keys=[requester_id])
    approver = relationship("User", foreign_keys=[approver_id])

    def __repr__(self) -> str:
        return f"<ApprovalWorkflow risk={self.risk_id} [{self.status}]>"
