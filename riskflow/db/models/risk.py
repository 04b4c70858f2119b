"""Risk register model.

``risk_level`` is derived from impact and probability by ORM hooks on every
insert and update, so no write path can store a stale level.
"""

import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Uuid, event
from sqlalchemy.orm import relationship

from riskflow.common.timeutil import utcnow
from riskflow.core.risk import RiskLevel, RiskStatus, calculate_risk_level
from riskflow.db.base import Base


class Risk(Base):
    __tablename__ = "risks"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=True)  # technological, operational, legal

    # Assessment
    impact = Column(String(20), nullable=True)
    probability = Column(String(20), nullable=True)
    risk_level = Column(String(20), nullable=False, default=RiskLevel.UNDEFINED.value, index=True)

    # Lifecycle
    status = Column(String(50), nullable=False, default=RiskStatus.OPEN.value, index=True)
    owner_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_by = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    organization = relationship("Organization", back_populates="risks")
    owner = relationship("User", foreign_keys=[owner_id])
    creator = relationship("User", foreign_keys=[created_by])
    approval_workflows = relationship(
        "ApprovalWorkflow",
        back_populates="risk",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ApprovalWorkflow.created_at.desc()",
    )

    def __repr__(self) -> str:
        return f"<Risk {self.title} [{self.risk_level}/{self.status}]>"


@event.listens_for(Risk, "before_insert")
@event.listens_for(Risk, "before_update")
def _recompute_risk_level(mapper, connection, target: Risk) -> None:
    target.risk_level = calculate_risk_level(target.impact, target.probability).value
