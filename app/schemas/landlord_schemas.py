from datetime import datetime
from pydantic import BaseModel, Field


class LandlordCreate(BaseModel):
    """Schema for creating a landlord"""

    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    phone: str = Field(..., min_length=1, max_length=50)


class LandlordUpdate(BaseModel):
    """Schema for partially updating a landlord (property_count is not writable)"""

    model_config = {"extra": "forbid"}

    name: str | None = Field(None, min_length=1, max_length=255)
    email: str | None = Field(
        None, min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
    )
    phone: str | None = Field(None, min_length=1, max_length=50)


class LandlordResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    user_id: int
    name: str
    email: str
    phone: str
    property_count: int
    created_at: datetime
    updated_at: datetime


class LandlordSummary(BaseModel):
    """Landlord fields embedded in policy detail views"""

    model_config = {"from_attributes": True}

    id: int
    name: str
    email: str
    phone: str


class LandlordListResponse(BaseModel):
    landlords: list[LandlordResponse]
    total: int
