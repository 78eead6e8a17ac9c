from datetime import date, datetime
from decimal import Decimal
from pydantic import BaseModel, Field, model_validator
from app.models.tenant import PaymentStatus


class TenantCreate(BaseModel):
    """Schema for adding a tenant to a property"""

    property_id: int = Field(..., gt=0)
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    rent_amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    payment_status: PaymentStatus = PaymentStatus.PENDING
    lease_start: date
    lease_end: date
    last_payment_date: date | None = None

    @model_validator(mode="after")
    def check_lease_order(self) -> "TenantCreate":
        if self.lease_end < self.lease_start:
            raise ValueError("lease_end must be on or after lease_start")
        return self


class TenantUpdate(BaseModel):
    """
    Schema for partially updating a tenant.

    Lease order is re-checked by the service against the merged record,
    since only one of the two dates may be supplied.
    """

    model_config = {"extra": "forbid"}

    property_id: int | None = Field(None, gt=0)
    name: str | None = Field(None, min_length=1, max_length=255)
    email: str | None = Field(
        None, min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
    )
    rent_amount: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)
    payment_status: PaymentStatus | None = None
    lease_start: date | None = None
    lease_end: date | None = None
    last_payment_date: date | None = None


class TenantResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    user_id: int
    property_id: int
    name: str
    email: str
    rent_amount: float
    payment_status: PaymentStatus
    lease_start: date
    lease_end: date
    last_payment_date: date | None
    created_at: datetime
    updated_at: datetime


class TenantSummary(BaseModel):
    """Tenant fields embedded in policy and claim detail views"""

    model_config = {"from_attributes": True}

    id: int
    name: str
    email: str
    rent_amount: float


class TenantListResponse(BaseModel):
    tenants: list[TenantResponse]
    total: int
