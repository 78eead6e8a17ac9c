from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import AnyHttpUrl, BaseModel, Field

from app.models.claim import ClaimStatus
from app.schemas.policy_schemas import PolicySummary
from app.schemas.tenant_schemas import TenantSummary


class ClaimCreate(BaseModel):
    """
    Schema for filing a claim against a policy.

    Claims always start as pending; claim_number is issued by the service.
    """

    model_config = {"extra": "forbid"}

    policy_id: int = Field(..., gt=0)
    amount_requested: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    months_of_unpaid_rent: int = Field(default=0, ge=0)
    evidence_links: Optional[list[AnyHttpUrl]] = Field(default_factory=list, max_length=50)
    notes: Optional[str] = Field(None, max_length=5000)


class ClaimUpdate(BaseModel):
    """
    Schema for updating a claim.

    Only status, evidence and notes change after filing.
    """

    model_config = {"extra": "forbid"}

    status: Optional[ClaimStatus] = None
    evidence_links: Optional[list[AnyHttpUrl]] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=5000)


class ClaimResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    user_id: int
    policy_id: int
    claim_number: str
    status: ClaimStatus
    amount_requested: float
    months_of_unpaid_rent: int
    evidence_links: Optional[list[str]]
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime


class ClaimListItem(ClaimResponse):
    """Claim row carrying its policy number and party names"""

    policy_number: str
    landlord_name: str
    tenant_name: str


class ClaimListResponse(BaseModel):
    claims: list[ClaimListItem]
    total: int


class ClaimDetail(BaseModel):
    """Claim resolved with its policy and the insured tenant"""

    claim: ClaimResponse
    policy: PolicySummary
    tenant: TenantSummary
