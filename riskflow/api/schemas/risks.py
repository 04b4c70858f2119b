from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from riskflow.core.risk import RiskCategory, RiskLevel, RiskStatus, Severity, parse_severity


class _SeverityFields(BaseModel):
    impact: Optional[Severity] = None
    probability: Optional[Severity] = None

    @field_validator("impact", "probability", mode="before")
    @classmethod
    def _parse_severity(cls, value):
        # Accepts the legacy Portuguese labels as well as the enum values
        return parse_severity(value)


class RiskCreate(_SeverityFields):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[RiskCategory] = None
    owner_id: Optional[UUID] = None  # defaults to the creator


class RiskUpdate(_SeverityFields):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[RiskCategory] = None
    status: Optional[RiskStatus] = None
    owner_id: Optional[UUID] = None


class RiskResponse(BaseModel):
    id: UUID
    org_id: UUID
    title: str
    description: Optional[str]
    category: Optional[RiskCategory]
    impact: Optional[Severity]
    probability: Optional[Severity]
    risk_level: RiskLevel
    status: RiskStatus
    owner_id: Optional[UUID]
    created_by: Optional[UUID]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
