from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field
from app.models.property import PropertyStatus, PropertyType


class PropertyCreate(BaseModel):
    """Schema for creating a property under a landlord"""

    landlord_id: int = Field(..., gt=0)
    name: str = Field(..., min_length=1, max_length=255)
    address: str = Field(..., min_length=1, max_length=500)
    city: str = Field(default="Unknown", min_length=1, max_length=255)
    rent_amount: Decimal = Field(default=Decimal("0.00"), ge=0, max_digits=12, decimal_places=2)
    property_type: PropertyType
    status: PropertyStatus = PropertyStatus.AVAILABLE
    max_tenants: int = Field(default=1, ge=1)
    description: str | None = Field(None, max_length=5000)


class PropertyUpdate(BaseModel):
    """Schema for partially updating a property (current_tenants is maintained, not writable)"""

    model_config = {"extra": "forbid"}

    landlord_id: int | None = Field(None, gt=0)
    name: str | None = Field(None, min_length=1, max_length=255)
    address: str | None = Field(None, min_length=1, max_length=500)
    city: str | None = Field(None, min_length=1, max_length=255)
    rent_amount: Decimal | None = Field(None, ge=0, max_digits=12, decimal_places=2)
    property_type: PropertyType | None = None
    status: PropertyStatus | None = None
    max_tenants: int | None = Field(None, ge=1)
    description: str | None = Field(None, max_length=5000)


class PropertyResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    user_id: int
    landlord_id: int
    name: str
    address: str
    city: str
    rent_amount: float
    property_type: PropertyType
    status: PropertyStatus
    max_tenants: int
    current_tenants: int
    description: str | None
    created_at: datetime
    updated_at: datetime


class PropertySummary(BaseModel):
    """Property fields embedded in policy detail views"""

    model_config = {"from_attributes": True}

    id: int
    name: str
    address: str
    city: str
    property_type: PropertyType
    rent_amount: float


class PropertyListResponse(BaseModel):
    properties: list[PropertyResponse]
    total: int
