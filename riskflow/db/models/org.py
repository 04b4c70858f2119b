import uuid
from sqlalchemy import Column, String, DateTime, JSON, Uuid
from sqlalchemy.orm import relationship

from riskflow.common.timeutil import utcnow
from riskflow.db.base import Base


class Organization(Base):
    __tablename__ = "organizations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    settings = Column(JSON, default=dict)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    users = relationship("User", back_populates="organization")
    risks = relationship("Risk", back_populates="organization", cascade="all, delete-orphan", passive_deletes=True)
    webhooks = relationship("WebhookConfig", back_populates="organization", cascade="all, delete-orphan", passive_deletes=True)
