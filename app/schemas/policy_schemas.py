from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from app.models.policy import PolicyStatus, RiskDecision
from app.schemas.landlord_schemas import LandlordSummary
from app.schemas.property_schemas import PropertySummary
from app.schemas.tenant_schemas import TenantSummary


class PolicyCreate(BaseModel):
    """
    Schema for issuing a policy.

    end_date, premium_amount and policy_number are derived or issued by
    the service; sending them is rejected.
    """

    model_config = {"extra": "forbid"}

    landlord_id: int = Field(..., gt=0)
    property_id: int = Field(..., gt=0)
    tenant_id: int = Field(..., gt=0)
    status: PolicyStatus = PolicyStatus.ACTIVE
    coverage_months: int = Field(..., ge=1, le=120)
    risk_score: Optional[Decimal] = Field(None, ge=0, le=100, max_digits=5, decimal_places=2)
    decision: Optional[RiskDecision] = None
    start_date: date

    @model_validator(mode="after")
    def check_risk_pair(self) -> "PolicyCreate":
        if (self.risk_score is None) != (self.decision is None):
            raise ValueError("risk_score and decision must be provided together")
        return self


class PolicyStatusUpdate(BaseModel):
    """The only mutable field of an issued policy"""

    status: PolicyStatus


class PolicyResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    user_id: int
    landlord_id: int
    property_id: int
    tenant_id: int
    policy_number: str
    status: PolicyStatus
    coverage_months: int
    risk_score: float
    decision: RiskDecision
    start_date: date
    end_date: date
    premium_amount: float
    created_at: datetime
    updated_at: datetime


class PolicySummary(BaseModel):
    """Policy fields embedded in claim detail views"""

    model_config = {"from_attributes": True}

    id: int
    policy_number: str
    status: PolicyStatus
    start_date: date
    end_date: date
    premium_amount: float


class PolicyListItem(PolicyResponse):
    """Policy row carrying the names of its parties"""

    tenant_name: str
    landlord_name: str
    property_name: str


class PolicyListResponse(BaseModel):
    policies: list[PolicyListItem]
    total: int


class PolicyDetail(BaseModel):
    """Policy resolved with its tenant, property and landlord"""

    policy: PolicyResponse
    tenant: TenantSummary
    property: PropertySummary
    landlord: LandlordSummary
